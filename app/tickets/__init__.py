"""Ticket store, entitlement policy and validation."""

from .models import Ticket, ValidationDecision
from .repository import TicketRepository
from .service import TicketService
from .state import EntitlementPolicy, TicketKind
from .validator import TicketValidator

__all__ = [
    "EntitlementPolicy",
    "Ticket",
    "TicketKind",
    "TicketRepository",
    "TicketService",
    "TicketValidator",
    "ValidationDecision",
]
