from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Protocol, Sequence

from app.core.errors import ErrorSource, InvalidInputError, NotFoundError
from app.metrics import metrics_registry
from app.metrics.definitions import TICKETS_ISSUED

from .models import Ticket
from .repository import TicketRepository
from .state import EntitlementPolicy, TicketKind

logger = logging.getLogger(__name__)


class UserLookup(Protocol):
    async def ensure_exists(self, user_id: int) -> None:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_ticket_id() -> str:
    return f"TICKET-{uuid.uuid4().hex}"


class TicketService:
    """Ticket issuance and read projections over issued tickets."""

    def __init__(
        self,
        repository: TicketRepository,
        *,
        users: UserLookup,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._users = users
        self._clock = clock

    async def issue_ticket(self, *, owner_id: int, kind: str, initial_uses: int | None = None) -> Ticket:
        try:
            ticket_kind = TicketKind.parse(kind)
        except ValueError as exc:
            raise InvalidInputError("Invalid ticket kind. Use 'limited', 'daily' or 'annual'.") from exc

        now = self._clock()
        try:
            valid_until, remaining_uses = EntitlementPolicy.initial_entitlement(
                ticket_kind, issued_at=now, initial_uses=initial_uses
            )
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

        await self._users.ensure_exists(owner_id)

        ticket = Ticket(
            id=_new_ticket_id(),
            owner_id=owner_id,
            kind=ticket_kind,
            created_at=now,
            valid_until=valid_until,
            remaining_uses=remaining_uses,
        )
        await self._repository.create_ticket(ticket)
        metrics_registry.counter(TICKETS_ISSUED).inc(kind=ticket_kind.value)
        logger.info("Issued %s ticket %s for user %s", ticket_kind.value, ticket.id, owner_id)
        return ticket

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self._repository.get_ticket(ticket_id)
        if ticket is None:
            raise NotFoundError(f"Ticket {ticket_id} not found", source=ErrorSource.TICKET_STORE)
        return ticket

    async def list_tickets(self) -> Sequence[Ticket]:
        return await self._repository.list_tickets()

    async def list_by_owner(self, owner_id: int) -> Sequence[Ticket]:
        return await self._repository.list_by_owner(owner_id)
