"""Boundary gate applied to tickets entering or leaving the bridge."""

from .ticket_gate import check_sync_type, validate

__all__ = ["check_sync_type", "validate"]
