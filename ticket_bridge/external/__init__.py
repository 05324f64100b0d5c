"""
The external ticket system the bridge synchronizes with.
"""

from .store import PRIORITIES, STATUSES, ExternalTicketStore

__all__ = ["ExternalTicketStore", "PRIORITIES", "STATUSES"]
