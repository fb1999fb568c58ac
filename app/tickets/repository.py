from __future__ import annotations

from datetime import timezone
from typing import Sequence

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from packages.db.models import TicketTable, ensure_datetime

from .models import Ticket
from .state import TicketKind


class TicketRepository:
    """Persistence helper wrapping the `tickets` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._engine: AsyncEngine | None = engine

    async def ensure_schema(self) -> None:
        if self._engine is None:
            raise RuntimeError("Session factory is not bound to an async engine")
        async with self._engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)

    async def create_ticket(self, ticket: Ticket) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                session.add(
                    TicketTable(
                        id=ticket.id,
                        owner_id=ticket.owner_id,
                        kind=ticket.kind.value,
                        created_at=ticket.created_at.astimezone(timezone.utc),
                        valid_until=ticket.valid_until.astimezone(timezone.utc) if ticket.valid_until else None,
                        remaining_uses=ticket.remaining_uses,
                    )
                )

    async def get_ticket(self, ticket_id: str) -> Ticket | None:
        async with self._session_factory() as session:
            row = await session.get(TicketTable, ticket_id)
            if row is None:
                return None
            return self._table_to_ticket(row)

    async def list_tickets(self) -> Sequence[Ticket]:
        async with self._session_factory() as session:
            result = await session.execute(select(TicketTable).order_by(TicketTable.created_at.asc()))
            return [self._table_to_ticket(row) for row in result.scalars().all()]

    async def list_by_owner(self, owner_id: int) -> Sequence[Ticket]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TicketTable)
                .where(TicketTable.owner_id == owner_id)
                .order_by(TicketTable.created_at.asc())
            )
            return [self._table_to_ticket(row) for row in result.scalars().all()]

    async def consume_use(self, ticket_id: str) -> int | None:
        """Atomically spend one use of a limited ticket.

        Returns the remaining uses after the decrement, or ``None`` when the
        ticket has nothing left to spend. The read and the write happen in a
        single conditional UPDATE, so two concurrent callers can never both
        take the last use.
        """

        statement = (
            update(TicketTable)
            .where(
                TicketTable.id == ticket_id,
                TicketTable.kind == TicketKind.LIMITED.value,
                TicketTable.remaining_uses > 0,
            )
            .values(remaining_uses=TicketTable.remaining_uses - 1)
            .returning(TicketTable.remaining_uses)
            .execution_options(synchronize_session=False)
        )
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(statement)
                return result.scalar_one_or_none()

    @staticmethod
    def _table_to_ticket(row: TicketTable) -> Ticket:
        return Ticket(
            id=row.id,
            owner_id=row.owner_id,
            kind=TicketKind(row.kind),
            created_at=ensure_datetime(row.created_at),
            valid_until=ensure_datetime(row.valid_until) if row.valid_until is not None else None,
            remaining_uses=row.remaining_uses,
        )
