from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Protocol, Sequence

from app.core.errors import DomainError, ErrorSource, ForbiddenError, NotFoundError
from app.metrics import metrics_registry
from app.metrics.definitions import QUEUE_ADMISSIONS, QUEUE_EXITS

from .models import QueueEntry
from .repository import QueueRepository

if TYPE_CHECKING:
    from app.clients.attractions import AttractionSnapshot

logger = logging.getLogger(__name__)


class AttractionLookup(Protocol):
    async def get_attraction(self, attraction_id: int) -> AttractionSnapshot:
        ...


class UserLookup(Protocol):
    async def ensure_exists(self, user_id: int) -> None:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueueAdmissionManager:
    """Admit users into attraction queues and remove them on exit.

    The manager is the only writer of the queue store. Admission requires the
    user to exist, the attraction to resolve and be operational, and no
    existing entry for the same (attraction, user) pair.
    """

    def __init__(
        self,
        repository: QueueRepository,
        *,
        attractions: AttractionLookup,
        users: UserLookup,
        operational_status_label: str = "Em funcionamento",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._attractions = attractions
        self._users = users
        self._operational_status_label = operational_status_label
        self._clock = clock

    async def enter(self, attraction_id: int, user_id: int) -> QueueEntry:
        admissions = metrics_registry.counter(QUEUE_ADMISSIONS)
        try:
            await self._users.ensure_exists(user_id)
            attraction = await self._attractions.get_attraction(attraction_id)
            if not attraction.is_operational(self._operational_status_label):
                raise ForbiddenError(
                    f"Attraction {attraction.name or attraction_id} is not operational. Status: {attraction.status}",
                    source=ErrorSource.ATTRACTION_DIRECTORY,
                )
            entry = await self._repository.add(attraction_id, user_id, self._clock())
        except DomainError as exc:
            admissions.inc(outcome=exc.code.value.lower())
            raise

        admissions.inc(outcome="admitted")
        logger.info("User %s entered the queue for attraction %s", user_id, attraction_id)
        return entry

    async def exit(self, attraction_id: int, user_id: int) -> None:
        removed = await self._repository.remove(attraction_id, user_id)
        if not removed:
            metrics_registry.counter(QUEUE_EXITS).inc(outcome="not_found")
            raise NotFoundError(
                f"User {user_id} is not in the queue for attraction {attraction_id}",
                source=ErrorSource.QUEUE_STORE,
            )
        metrics_registry.counter(QUEUE_EXITS).inc(outcome="removed")
        logger.info("User %s left the queue for attraction %s", user_id, attraction_id)

    async def get_entry(self, entry_id: int) -> QueueEntry:
        entry = await self._repository.get(entry_id)
        if entry is None:
            raise NotFoundError(f"Queue entry {entry_id} not found", source=ErrorSource.QUEUE_STORE)
        return entry

    async def list_all(self) -> Sequence[QueueEntry]:
        return await self._repository.list_all()

    async def list_by_user(self, user_id: int) -> Sequence[QueueEntry]:
        return await self._repository.list_by_user(user_id)

    async def list_by_attraction(self, attraction_id: int) -> Sequence[QueueEntry]:
        await self._attractions.get_attraction(attraction_id)
        return await self._repository.list_by_attraction(attraction_id)
