"""Database models and utilities."""

from .models import QueueEntryTable, TicketTable, ensure_datetime

__all__ = [
    "ensure_datetime",
    "QueueEntryTable",
    "TicketTable",
]
