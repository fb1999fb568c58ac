"""Queue store and admission policy."""

from .models import QueueEntry
from .repository import QueueRepository
from .service import QueueAdmissionManager

__all__ = ["QueueAdmissionManager", "QueueEntry", "QueueRepository"]
