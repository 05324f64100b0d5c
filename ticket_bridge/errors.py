"""
Error taxonomy for the ticket sync bridge.

Every failure that crosses the bridge boundary is a BridgeError carrying a
stable error code. Callers on the hub side receive these typed failures,
never raw exceptions from the collaborators.

- ValidationError: a required ticket field is missing or empty
- MappingError: an outbound user has no entry in the tenant's user table
- ConfigUnavailableError: the config collaborator could not provide a config
- TransportError: pushing to the hub or accepting into the external store failed
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class BridgeError(Exception):
    """
    Base class for all bridge failures.

    Attributes:
        code: Stable error code for programmatic handling
        message: Human-readable error description
    """

    error = "bridge_error"

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "error": self.error,
            "code": self.code,
            "message": self.message,
        }


class ValidationError(BridgeError):
    """A ticket failed the boundary check. Reports the first offending field."""

    error = "validation_error"

    def __init__(self, field: str, message: Optional[str] = None, code: str = "MISSING_FIELD"):
        self.field = field
        super().__init__(code, message or f"Field {field} cannot be null or empty")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        return data


class MappingError(BridgeError):
    """An outbound user id has no representation in the external system."""

    error = "mapping_error"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(
            "USER_NOT_MAPPED",
            f"User '{user_id}' has no mapping for the external system",
        )


class ConfigUnavailableError(BridgeError):
    """The config collaborator failed to provide a tenant's mapping config."""

    error = "config_unavailable"

    def __init__(self, tenant_id: str, reason: str = ""):
        self.tenant_id = tenant_id
        message = f"Mapping config for tenant '{tenant_id}' is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__("CONFIG_UNAVAILABLE", message)


class TransportError(BridgeError):
    """Handing a ticket to the other side failed."""

    error = "transport_error"

    def __init__(self, message: str, code: str = "TRANSPORT_FAILED"):
        super().__init__(code, message)
