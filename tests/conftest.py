from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from app.clients.attractions import AttractionSnapshot
from app.core.errors import ErrorSource, NotFoundError
from app.queues.repository import QueueRepository
from app.tickets.repository import TicketRepository

OPERATIONAL = "Em funcionamento"


class FakeUsers:
    def __init__(self, known: set[int] | None = None) -> None:
        self.known = known if known is not None else {111, 222, 333}
        self.calls: list[int] = []

    async def ensure_exists(self, user_id: int) -> None:
        self.calls.append(user_id)
        if user_id not in self.known:
            raise NotFoundError(f"User (CPF) {user_id} not found", source=ErrorSource.USER_REGISTRY)


class FakeAttractions:
    def __init__(self, *snapshots: AttractionSnapshot) -> None:
        self.snapshots = {snapshot.id: snapshot for snapshot in snapshots}

    async def get_attraction(self, attraction_id: int) -> AttractionSnapshot:
        if attraction_id not in self.snapshots:
            raise NotFoundError(
                f"Attraction {attraction_id} not found", source=ErrorSource.ATTRACTION_DIRECTORY
            )
        return self.snapshots[attraction_id]


class SteppingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


def make_attraction(attraction_id: int = 1, *, status: str = OPERATIONAL, capacity: int = 5) -> AttractionSnapshot:
    return AttractionSnapshot(
        id=attraction_id,
        nome=f"Attraction {attraction_id}",
        capacidade=capacity,
        tempo_medio=4,
        status=status,
    )


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncEngine:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'park.db'}")
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def ticket_repository(engine: AsyncEngine, session_factory: async_sessionmaker) -> TicketRepository:
    repository = TicketRepository(session_factory, engine=engine)
    await repository.ensure_schema()
    return repository


@pytest_asyncio.fixture
async def queue_repository(engine: AsyncEngine, session_factory: async_sessionmaker) -> QueueRepository:
    repository = QueueRepository(session_factory, engine=engine)
    await repository.ensure_schema()
    return repository
