"""
HTTP API of the ticket sync bridge.

The hub delivers ticket mutations to ``POST /tickets/sync``; the config
service pushes changed tenant configs to ``PUT /tenants/{id}/mapping-config``.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from .config import get_settings
from .core.bridge import Bridge, build_bridge
from .errors import (
    BridgeError,
    ConfigUnavailableError,
    MappingError,
    TransportError,
    ValidationError,
)
from .log import configure_logging
from .schemas.ticket import MappingConfig, Ticket

logger = structlog.get_logger()

# Global bridge instance, created by the lifespan handler
bridge: Optional[Bridge] = None

settings = get_settings()

ERROR_STATUS_CODES = {
    ValidationError: 422,
    MappingError: 422,
    ConfigUnavailableError: 503,
    TransportError: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    global bridge

    configure_logging(settings)
    logger.info("Starting Ticket Sync Bridge")

    try:
        bridge = build_bridge(settings)
        await bridge.start()
        logger.info("Bridge started successfully", adapter_id=settings.adapter_id)
    except Exception as e:
        logger.error(f"Failed to start application: {e}")
        raise

    yield

    logger.info("Shutting down Ticket Sync Bridge")
    if bridge:
        await bridge.stop()
        bridge = None
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Bidirectional ticket synchronization between a hub and an external ticket system",
    version=importlib.metadata.version("ticket-sync-bridge"),
    lifespan=lifespan,
)


@app.exception_handler(BridgeError)
async def bridge_error_handler(request, exc: BridgeError) -> JSONResponse:
    """Turn bridge failures into typed JSON errors."""
    status_code = 500
    for error_type, code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            status_code = code
            break
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


def _require_bridge() -> Bridge:
    if not bridge:
        raise HTTPException(status_code=503, detail="Bridge not initialized")
    return bridge


# Health and Info Endpoints
@app.get("/health", tags=["system"])
async def health() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/version", tags=["system"])
def version() -> dict[str, str]:
    """Return the version of the application."""
    return {"version": importlib.metadata.version("ticket-sync-bridge")}


@app.get("/status", tags=["system"])
async def get_system_status() -> dict[str, Any]:
    """Get adapter status and recent sync counters."""
    current = _require_bridge()
    return {
        "adapter": current.adapter.get_status(),
        "events": dict(current.telemetry.counters),
        "settings": {
            "environment": settings.environment,
            "debug": settings.debug,
            "max_update_delay_seconds": settings.max_update_delay_seconds,
        },
    }


# Ticket Endpoints
@app.post("/tickets/sync", tags=["tickets"])
async def sync_ticket(ticket: Ticket) -> Ticket:
    """Hub subscription boundary: forward a created or updated hub ticket."""
    current = _require_bridge()
    log = logger.bind(hub_id=ticket.hub_id, tenant_id=ticket.customer_id)
    log.info("inbound_sync_requested")

    accepted = await current.adapter.sync_inbound(ticket)

    log.info("inbound_sync_completed", external_id=accepted.external_id)
    return accepted


@app.get("/tickets", tags=["tickets"])
async def list_tickets() -> List[Ticket]:
    """List tickets held by the external system."""
    return _require_bridge().store.tickets()


@app.get("/tickets/{external_id}", tags=["tickets"])
async def get_ticket(external_id: str) -> Ticket:
    """Get a ticket as the external system currently sees it."""
    ticket = _require_bridge().store.get(external_id)
    if ticket is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return ticket


# Config Endpoints
@app.put("/tenants/{tenant_id}/mapping-config", tags=["config"])
async def replace_mapping_config(tenant_id: str, config: MappingConfig) -> Dict[str, str]:
    """Config push channel: replace a tenant's cached mapping config."""
    current = _require_bridge()
    current.config_store.replace_config(tenant_id, config)
    logger.info("mapping_config_replaced", tenant_id=tenant_id)
    return {"status": "success", "tenant_id": tenant_id}


@app.get("/tenants/{tenant_id}/mapping-config", tags=["config"])
async def get_mapping_config(tenant_id: str) -> MappingConfig:
    """Get the mapping config the bridge uses for a tenant."""
    return await _require_bridge().config_store.get_config(tenant_id)
