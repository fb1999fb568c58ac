from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from app.core.errors import ConflictError, ErrorSource
from packages.db.models import QueueEntryTable, ensure_datetime

from .models import QueueEntry


class QueueRepository:
    """Persistence helper wrapping the `queue_entries` table."""

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

    async def add(self, attraction_id: int, user_id: int, entered_at: datetime) -> QueueEntry:
        """Insert an entry; the (attraction, user) unique constraint rejects duplicates."""

        row = QueueEntryTable(
            attraction_id=attraction_id,
            user_id=user_id,
            entered_at=entered_at.astimezone(timezone.utc),
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
                    await session.flush()
                    entry = self._table_to_entry(row)
        except IntegrityError as exc:
            raise ConflictError(
                f"User {user_id} is already in the queue for attraction {attraction_id}",
                source=ErrorSource.QUEUE_STORE,
            ) from exc
        return entry

    async def remove(self, attraction_id: int, user_id: int) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(QueueEntryTable).where(
                        QueueEntryTable.attraction_id == attraction_id,
                        QueueEntryTable.user_id == user_id,
                    )
                )
        return bool(result.rowcount)

    async def get(self, entry_id: int) -> QueueEntry | None:
        async with self._session_factory() as session:
            row = await session.get(QueueEntryTable, entry_id)
            if row is None:
                return None
            return self._table_to_entry(row)

    async def list_all(self) -> Sequence[QueueEntry]:
        async with self._session_factory() as session:
            result = await session.execute(select(QueueEntryTable).order_by(QueueEntryTable.id.asc()))
            return [self._table_to_entry(row) for row in result.scalars().all()]

    async def list_by_user(self, user_id: int) -> Sequence[QueueEntry]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(QueueEntryTable)
                .where(QueueEntryTable.user_id == user_id)
                .order_by(QueueEntryTable.entered_at.asc(), QueueEntryTable.id.asc())
            )
            return [self._table_to_entry(row) for row in result.scalars().all()]

    async def list_by_attraction(self, attraction_id: int) -> Sequence[QueueEntry]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(QueueEntryTable)
                .where(QueueEntryTable.attraction_id == attraction_id)
                .order_by(QueueEntryTable.entered_at.asc(), QueueEntryTable.id.asc())
            )
            return [self._table_to_entry(row) for row in result.scalars().all()]

    @staticmethod
    def _table_to_entry(row: QueueEntryTable) -> QueueEntry:
        if row.id is None:
            raise RuntimeError("Queue entry was not assigned an id")
        return QueueEntry(
            id=row.id,
            attraction_id=row.attraction_id,
            user_id=row.user_id,
            entered_at=ensure_datetime(row.entered_at),
        )
