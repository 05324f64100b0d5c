from .ticket import (
    Attachment,
    Comment,
    MappingConfig,
    Ticket,
    UserIdMapping,
    utc_now,
)

__all__ = [
    "Attachment",
    "Comment",
    "MappingConfig",
    "Ticket",
    "UserIdMapping",
    "utc_now",
]
