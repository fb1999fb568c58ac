from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .state import TicketKind


@dataclass(slots=True)
class Ticket:
    """Issued credential with its remaining entitlement."""

    id: str
    owner_id: int
    kind: TicketKind
    created_at: datetime
    valid_until: datetime | None
    remaining_uses: int | None


@dataclass(slots=True)
class ValidationDecision:
    """Outcome of presenting a ticket at a turnstile."""

    allowed: bool
    message: str
    owner_id: int
    kind: TicketKind
    remaining_uses: int | None = None
    entitlement_consumed: bool = False
