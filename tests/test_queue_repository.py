from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.core.errors import ConflictError
from app.queues.repository import QueueRepository

BASE = datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_add_assigns_id_and_rejects_duplicates(queue_repository: QueueRepository):
    entry = await queue_repository.add(1, 111, BASE)

    assert entry.id is not None
    assert entry.entered_at == BASE
    with pytest.raises(ConflictError):
        await queue_repository.add(1, 111, BASE + timedelta(minutes=1))

    assert len(await queue_repository.list_all()) == 1
    assert await queue_repository.get(entry.id) == entry


@pytest.mark.asyncio
async def test_same_user_may_wait_for_different_attractions(queue_repository: QueueRepository):
    await queue_repository.add(1, 111, BASE)
    await queue_repository.add(2, 111, BASE)

    entries = await queue_repository.list_by_user(111)

    assert [entry.attraction_id for entry in entries] == [1, 2]


@pytest.mark.asyncio
async def test_list_by_attraction_orders_by_entry_time(queue_repository: QueueRepository):
    await queue_repository.add(7, 333, BASE + timedelta(seconds=30))
    await queue_repository.add(7, 111, BASE)
    await queue_repository.add(7, 222, BASE + timedelta(seconds=10))
    await queue_repository.add(8, 444, BASE - timedelta(hours=1))

    entries = await queue_repository.list_by_attraction(7)

    assert [entry.user_id for entry in entries] == [111, 222, 333]


@pytest.mark.asyncio
async def test_remove_reports_whether_an_entry_existed(queue_repository: QueueRepository):
    await queue_repository.add(1, 111, BASE)

    assert await queue_repository.remove(1, 111) is True
    assert await queue_repository.remove(1, 111) is False
    await queue_repository.add(1, 111, BASE + timedelta(minutes=5))
    assert len(await queue_repository.list_by_attraction(1)) == 1
