from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from app.tickets.models import Ticket
from app.tickets.repository import TicketRepository
from app.tickets.state import TicketKind

NOW = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)


def _limited(ticket_id: str = "TICKET-1", uses: int = 2, owner_id: int = 111) -> Ticket:
    return Ticket(
        id=ticket_id,
        owner_id=owner_id,
        kind=TicketKind.LIMITED,
        created_at=NOW,
        valid_until=None,
        remaining_uses=uses,
    )


@pytest.mark.asyncio
async def test_create_and_get_ticket_round_trips_entitlement(ticket_repository: TicketRepository):
    daily = Ticket(
        id="TICKET-D",
        owner_id=12345678901,
        kind=TicketKind.DAILY,
        created_at=NOW,
        valid_until=NOW + timedelta(days=1),
        remaining_uses=None,
    )
    await ticket_repository.create_ticket(daily)

    stored = await ticket_repository.get_ticket("TICKET-D")

    assert stored == daily
    assert stored.valid_until.tzinfo is not None
    assert await ticket_repository.get_ticket("missing") is None


@pytest.mark.asyncio
async def test_list_by_owner_filters(ticket_repository: TicketRepository):
    await ticket_repository.create_ticket(_limited("TICKET-A", owner_id=111))
    await ticket_repository.create_ticket(_limited("TICKET-B", owner_id=222))

    owned = await ticket_repository.list_by_owner(222)
    everything = await ticket_repository.list_tickets()

    assert [ticket.id for ticket in owned] == ["TICKET-B"]
    assert {ticket.id for ticket in everything} == {"TICKET-A", "TICKET-B"}


@pytest.mark.asyncio
async def test_consume_use_stops_at_zero(ticket_repository: TicketRepository):
    await ticket_repository.create_ticket(_limited(uses=2))

    assert await ticket_repository.consume_use("TICKET-1") == 1
    assert await ticket_repository.consume_use("TICKET-1") == 0
    assert await ticket_repository.consume_use("TICKET-1") is None

    stored = await ticket_repository.get_ticket("TICKET-1")
    assert stored.remaining_uses == 0


@pytest.mark.asyncio
async def test_consume_use_ignores_time_based_tickets(ticket_repository: TicketRepository):
    annual = Ticket(
        id="TICKET-Y",
        owner_id=111,
        kind=TicketKind.ANNUAL,
        created_at=NOW,
        valid_until=NOW + timedelta(days=365),
        remaining_uses=None,
    )
    await ticket_repository.create_ticket(annual)

    assert await ticket_repository.consume_use("TICKET-Y") is None
    assert await ticket_repository.consume_use("unknown") is None


@pytest.mark.asyncio
async def test_concurrent_consumption_never_oversells(ticket_repository: TicketRepository):
    await ticket_repository.create_ticket(_limited(uses=3))

    results = await asyncio.gather(*(ticket_repository.consume_use("TICKET-1") for _ in range(10)))

    successes = [value for value in results if value is not None]
    assert sorted(successes) == [0, 1, 2]
    stored = await ticket_repository.get_ticket("TICKET-1")
    assert stored.remaining_uses == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kind, valid_until, remaining_uses",
    [
        (TicketKind.LIMITED, NOW + timedelta(days=1), 3),
        (TicketKind.LIMITED, None, None),
        (TicketKind.DAILY, NOW + timedelta(days=1), 3),
        (TicketKind.ANNUAL, None, None),
    ],
)
async def test_store_rejects_mismatched_entitlement(ticket_repository: TicketRepository, kind, valid_until, remaining_uses):
    ticket = Ticket(
        id="TICKET-X",
        owner_id=111,
        kind=kind,
        created_at=NOW,
        valid_until=valid_until,
        remaining_uses=remaining_uses,
    )

    with pytest.raises(IntegrityError):
        await ticket_repository.create_ticket(ticket)

    assert await ticket_repository.get_ticket("TICKET-X") is None
