from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from app.core.errors import ErrorSource, NotFoundError
from app.metrics import metrics_registry
from app.metrics.definitions import TICKET_VALIDATIONS

from .models import Ticket, ValidationDecision
from .repository import TicketRepository
from .state import EntitlementPolicy, TicketKind

logger = logging.getLogger(__name__)

_WINDOW_MESSAGES: dict[TicketKind, tuple[str, str]] = {
    TicketKind.DAILY: ("Unlimited daily access granted.", "Daily ticket expired."),
    TicketKind.ANNUAL: ("Annual pass access granted.", "Annual pass expired."),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketValidator:
    """Decide whether a presented ticket grants access right now.

    Limited tickets spend one use per successful validation through an atomic
    conditional decrement in the store; daily and annual tickets are checked
    against their validity window and never mutated. Spent uses are never
    given back.
    """

    def __init__(self, repository: TicketRepository, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._repository = repository
        self._clock = clock

    async def validate(self, ticket_id: str, *, now: datetime | None = None) -> ValidationDecision:
        ticket = await self._repository.get_ticket(ticket_id)
        if ticket is None:
            raise NotFoundError(f"Ticket {ticket_id} not found", source=ErrorSource.TICKET_STORE)

        if ticket.kind is TicketKind.LIMITED:
            decision = await self._consume(ticket)
        else:
            decision = self._check_window(ticket, now or self._clock())

        metrics_registry.counter(TICKET_VALIDATIONS).inc(
            kind=ticket.kind.value,
            outcome="allowed" if decision.allowed else "denied",
        )
        logger.info(
            "Validated ticket %s (%s): %s",
            ticket_id,
            ticket.kind.value,
            "allowed" if decision.allowed else "denied",
        )
        return decision

    async def _consume(self, ticket: Ticket) -> ValidationDecision:
        remaining = await self._repository.consume_use(ticket.id)
        if remaining is None:
            return ValidationDecision(
                allowed=False,
                message="Ticket has no remaining uses.",
                owner_id=ticket.owner_id,
                kind=ticket.kind,
                remaining_uses=0,
            )
        return ValidationDecision(
            allowed=True,
            message=f"Access granted. {remaining} uses remaining.",
            owner_id=ticket.owner_id,
            kind=ticket.kind,
            remaining_uses=remaining,
            entitlement_consumed=True,
        )

    @staticmethod
    def _check_window(ticket: Ticket, now: datetime) -> ValidationDecision:
        granted, expired = _WINDOW_MESSAGES[ticket.kind]
        allowed = EntitlementPolicy.within_window(ticket.valid_until, now)
        return ValidationDecision(
            allowed=allowed,
            message=granted if allowed else expired,
            owner_id=ticket.owner_id,
            kind=ticket.kind,
        )
