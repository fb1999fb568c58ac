from __future__ import annotations

import asyncio

import pytest

from app.core.errors import ConflictError, ErrorSource, ForbiddenError, NotFoundError
from app.queues.repository import QueueRepository
from app.queues.service import QueueAdmissionManager

from conftest import FakeAttractions, FakeUsers, SteppingClock, make_attraction


@pytest.fixture
def manager(queue_repository: QueueRepository) -> QueueAdmissionManager:
    return QueueAdmissionManager(
        queue_repository,
        attractions=FakeAttractions(make_attraction(1), make_attraction(2, status="Em manutenção")),
        users=FakeUsers(),
        clock=SteppingClock(),
    )


@pytest.mark.asyncio
async def test_enter_creates_entry(manager: QueueAdmissionManager):
    entry = await manager.enter(1, 111)

    assert (entry.attraction_id, entry.user_id) == (1, 111)
    assert await manager.get_entry(entry.id) == entry


@pytest.mark.asyncio
async def test_second_enter_before_exit_conflicts(manager: QueueAdmissionManager):
    await manager.enter(1, 111)

    with pytest.raises(ConflictError):
        await manager.enter(1, 111)

    await manager.exit(1, 111)
    await manager.enter(1, 111)
    assert len(await manager.list_by_attraction(1)) == 1


@pytest.mark.asyncio
async def test_concurrent_duplicate_enters_admit_once(manager: QueueAdmissionManager):
    results = await asyncio.gather(*(manager.enter(1, 222) for _ in range(4)), return_exceptions=True)

    admitted = [result for result in results if not isinstance(result, BaseException)]
    assert len(admitted) == 1
    assert all(isinstance(result, ConflictError) for result in results if isinstance(result, BaseException))


@pytest.mark.asyncio
async def test_enter_non_operational_attraction_is_forbidden(manager: QueueAdmissionManager):
    with pytest.raises(ForbiddenError) as excinfo:
        await manager.enter(2, 111)

    assert "Em manutenção" in excinfo.value.message
    assert await manager.list_all() == []


@pytest.mark.asyncio
async def test_enter_unknown_attraction_creates_nothing(manager: QueueAdmissionManager):
    with pytest.raises(NotFoundError) as excinfo:
        await manager.enter(99, 111)

    assert excinfo.value.source is ErrorSource.ATTRACTION_DIRECTORY
    assert await manager.list_all() == []


@pytest.mark.asyncio
async def test_enter_unknown_user_is_reported_by_registry(manager: QueueAdmissionManager):
    with pytest.raises(NotFoundError) as excinfo:
        await manager.enter(1, 404)

    assert excinfo.value.source is ErrorSource.USER_REGISTRY


@pytest.mark.asyncio
async def test_exit_without_entry_is_not_found(manager: QueueAdmissionManager):
    with pytest.raises(NotFoundError) as excinfo:
        await manager.exit(1, 111)

    assert excinfo.value.source is ErrorSource.QUEUE_STORE


@pytest.mark.asyncio
async def test_listings(manager: QueueAdmissionManager):
    await manager.enter(1, 333)
    await manager.enter(1, 111)
    await manager.enter(1, 222)

    assert [entry.user_id for entry in await manager.list_by_attraction(1)] == [333, 111, 222]
    assert [entry.attraction_id for entry in await manager.list_by_user(111)] == [1]
    with pytest.raises(NotFoundError):
        await manager.list_by_attraction(42)
    with pytest.raises(NotFoundError):
        await manager.get_entry(12345)
