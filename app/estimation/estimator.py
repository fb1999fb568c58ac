from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Protocol, Sequence

from opentelemetry import trace

from app.clients.attractions import AttractionSnapshot
from app.core.config import EstimatorVariant
from app.core.errors import ConfigurationError, DomainError, ErrorSource, NotFoundError, UpstreamUnavailableError
from app.metrics import metrics_registry
from app.metrics.definitions import WAIT_ESTIMATE_DURATION
from app.queues.models import QueueEntry

tracer = trace.get_tracer(__name__)


class AttractionSource(Protocol):
    async def get_attraction(self, attraction_id: int) -> AttractionSnapshot:
        ...


class QueueSource(Protocol):
    async def list_for_attraction(self, attraction_id: int) -> Sequence[QueueEntry]:
        ...


@dataclass(slots=True, frozen=True)
class WaitEstimate:
    attraction_id: int
    attraction_name: str
    attraction_status: str
    queue_length: int
    estimated_minutes: int
    variant: EstimatorVariant


def estimate_minutes(
    queue_length: int,
    capacity: int,
    avg_service_time: int,
    variant: EstimatorVariant = EstimatorVariant.EXCLUSIVE,
) -> int:
    """Minutes until service, counted in whole capacity batches.

    ``exclusive`` counts only the people already waiting; ``inclusive`` also
    counts a hypothetical new entrant.
    """

    if capacity <= 0:
        raise ConfigurationError(
            f"Attraction capacity must be positive, got {capacity}",
            source=ErrorSource.ATTRACTION_DIRECTORY,
        )
    people = queue_length + 1 if variant is EstimatorVariant.INCLUSIVE else queue_length
    return math.ceil(people / capacity) * avg_service_time


class WaitTimeEstimator:
    """Read-only estimator joining an attraction snapshot with its queue."""

    def __init__(
        self,
        attractions: AttractionSource,
        queues: QueueSource,
        *,
        variant: EstimatorVariant = EstimatorVariant.EXCLUSIVE,
        timeout: float = 10.0,
    ) -> None:
        self._attractions = attractions
        self._queues = queues
        self._variant = variant
        self._timeout = timeout

    @property
    def variant(self) -> EstimatorVariant:
        return self._variant

    async def estimate(self, attraction_id: int) -> WaitEstimate:
        with tracer.start_as_current_span("estimation.estimate") as span, metrics_registry.distribution(
            WAIT_ESTIMATE_DURATION
        ).time():
            span.set_attribute("attraction.id", attraction_id)
            attraction, queue = await self._fetch(attraction_id)
            minutes = estimate_minutes(len(queue), attraction.capacity, attraction.avg_service_time, self._variant)
            span.set_attribute("estimation.minutes", minutes)
            return WaitEstimate(
                attraction_id=attraction_id,
                attraction_name=attraction.name,
                attraction_status=attraction.status,
                queue_length=len(queue),
                estimated_minutes=minutes,
                variant=self._variant,
            )

    async def _fetch(self, attraction_id: int) -> tuple[AttractionSnapshot, Sequence[QueueEntry]]:
        try:
            attraction, queue = await asyncio.wait_for(
                asyncio.gather(
                    self._attractions.get_attraction(attraction_id),
                    self._queues.list_for_attraction(attraction_id),
                    return_exceptions=True,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailableError(
                f"Timed out fetching attraction {attraction_id} and its queue"
            ) from exc

        if isinstance(attraction, NotFoundError):
            raise NotFoundError(
                f"Attraction {attraction_id} not found", source=ErrorSource.ATTRACTION_DIRECTORY
            ) from attraction
        if isinstance(queue, NotFoundError):
            raise NotFoundError(
                f"Queue for attraction {attraction_id} not found", source=ErrorSource.QUEUE_STORE
            ) from queue
        for result, source in ((attraction, ErrorSource.ATTRACTION_DIRECTORY), (queue, ErrorSource.QUEUE_STORE)):
            if isinstance(result, DomainError):
                raise UpstreamUnavailableError(
                    f"Could not fetch data for attraction {attraction_id}: {result.message}",
                    source=result.source or source,
                ) from result
            if isinstance(result, BaseException):
                raise result
        return attraction, queue
