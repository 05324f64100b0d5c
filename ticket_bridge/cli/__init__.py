"""
Command Line Interface for the Ticket Sync Bridge.
"""

import asyncio
import random
import uuid
from typing import Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_settings
from ..core.bridge import build_bridge
from ..integrations.memory import InMemoryHub
from ..log import configure_logging
from ..schemas.ticket import Comment, Ticket


app = typer.Typer(help="Ticket Sync Bridge - hub <-> external ticket synchronization")
console = Console()


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, help="Port to run the API server on"),
    host: Optional[str] = typer.Option(None, help="Host to bind the server to"),
    dev: bool = typer.Option(False, help="Run in development mode"),
):
    """Start the bridge API server."""
    settings = get_settings()
    rprint(Panel.fit("Starting Ticket Sync Bridge", style="bold blue"))
    uvicorn.run(
        "ticket_bridge.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=dev,
    )


def _demo_ticket(tenant_id: str, index: int) -> Ticket:
    hub_id = str(uuid.uuid4())
    return Ticket(
        hub_id=hub_id,
        hub_link=f"https://hub.example.com/tickets/{hub_id}",
        customer_id=tenant_id,
        subject=f"Demo ticket #{index}",
        description="Created by the ticket-bridge demo command",
        status="Open",
        priority="Major",
        requester="john.doe@acme.com",
        assigned_to="peter.smith@acme.com",
        comments=[Comment(creator="john.doe@acme.com", text="Please have a look")],
    )


@app.command()
def demo(
    tickets: int = typer.Option(3, help="Number of hub tickets to create"),
    duration: float = typer.Option(10.0, help="Seconds to let the external system evolve"),
    max_delay: float = typer.Option(2.0, help="Maximum pause between external changes"),
    tenant_id: str = typer.Option("e8ab4178-81fb-43c9-8eae-1a61d609a991", help="Tenant id"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
):
    """Run an in-memory bridge and show what reaches the hub."""
    settings = get_settings().model_copy(
        update={
            "max_update_delay_seconds": max_delay,
            "hub_url": None,
            "config_service_url": None,
            "log_format": "console",
        }
    )
    configure_logging(settings)

    async def run() -> InMemoryHub:
        hub = InMemoryHub()
        bridge = build_bridge(settings, hub=hub, rng=random.Random(seed))
        await bridge.start()
        try:
            for index in range(1, tickets + 1):
                accepted = await hub.submit(_demo_ticket(tenant_id, index), settings.adapter_id)
                console.print(f"✅ Accepted {accepted[0].hub_id} as {accepted[0].external_link}")
            await asyncio.sleep(duration)
        finally:
            await bridge.stop()
        return hub

    hub = asyncio.run(run())

    table = Table(title="Updates pushed to the hub", show_header=True, header_style="bold magenta")
    table.add_column("Hub ticket", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Priority")
    table.add_column("Last modified")
    for ticket in hub.pushed:
        table.add_row(
            ticket.hub_id[:8],
            ticket.status or "",
            ticket.priority or "",
            ticket.last_modified.isoformat() if ticket.last_modified else "",
        )
    console.print(table)


@app.command()
def version():
    """Show version information."""
    from .. import __version__
    rprint(Panel.fit(f"Ticket Sync Bridge v{__version__}", style="bold green"))


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
