from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from app.core.config import EstimatorVariant
from app.core.errors import (
    ConfigurationError,
    ErrorSource,
    NotFoundError,
    UpstreamUnavailableError,
)
from app.estimation.estimator import WaitTimeEstimator, estimate_minutes
from app.queues.models import QueueEntry

from conftest import FakeAttractions, make_attraction

ENTERED = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeQueues:
    def __init__(self, lengths: dict[int, int] | None = None, error: Exception | None = None, delay: float = 0.0):
        self.lengths = lengths or {}
        self.error = error
        self.delay = delay

    async def list_for_attraction(self, attraction_id: int) -> list[QueueEntry]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [
            QueueEntry(id=index + 1, attraction_id=attraction_id, user_id=1000 + index, entered_at=ENTERED)
            for index in range(self.lengths.get(attraction_id, 0))
        ]


@pytest.mark.parametrize(
    "queue_length, capacity, avg, variant, expected",
    [
        (12, 5, 4, EstimatorVariant.EXCLUSIVE, 12),
        (10, 5, 4, EstimatorVariant.EXCLUSIVE, 8),
        (0, 5, 4, EstimatorVariant.EXCLUSIVE, 0),
        (0, 5, 4, EstimatorVariant.INCLUSIVE, 4),
        (10, 5, 4, EstimatorVariant.INCLUSIVE, 12),
        (1, 1, 3, EstimatorVariant.EXCLUSIVE, 3),
    ],
)
def test_estimate_minutes(queue_length, capacity, avg, variant, expected):
    assert estimate_minutes(queue_length, capacity, avg, variant) == expected


@pytest.mark.parametrize("capacity", [0, -3])
def test_non_positive_capacity_is_a_configuration_error(capacity):
    with pytest.raises(ConfigurationError) as excinfo:
        estimate_minutes(3, capacity, 4)
    assert excinfo.value.source is ErrorSource.ATTRACTION_DIRECTORY
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_estimate_joins_attraction_and_queue():
    estimator = WaitTimeEstimator(FakeAttractions(make_attraction(7)), FakeQueues({7: 12}))

    estimate = await estimator.estimate(7)

    assert estimate.attraction_id == 7
    assert estimate.attraction_name == "Attraction 7"
    assert estimate.attraction_status == "Em funcionamento"
    assert estimate.queue_length == 12
    assert estimate.estimated_minutes == 12
    assert estimate.variant is EstimatorVariant.EXCLUSIVE


@pytest.mark.asyncio
async def test_estimate_reports_closed_attractions_too():
    estimator = WaitTimeEstimator(
        FakeAttractions(make_attraction(7, status="Em manutenção")),
        FakeQueues({7: 3}),
        variant=EstimatorVariant.INCLUSIVE,
    )

    estimate = await estimator.estimate(7)

    assert estimate.attraction_status == "Em manutenção"
    assert estimate.estimated_minutes == 4


@pytest.mark.asyncio
async def test_zero_capacity_propagates():
    estimator = WaitTimeEstimator(FakeAttractions(make_attraction(7, capacity=0)), FakeQueues({7: 2}))

    with pytest.raises(ConfigurationError):
        await estimator.estimate(7)


@pytest.mark.asyncio
async def test_missing_attraction_is_named():
    estimator = WaitTimeEstimator(FakeAttractions(), FakeQueues())

    with pytest.raises(NotFoundError) as excinfo:
        await estimator.estimate(9)

    assert excinfo.value.message == "Attraction 9 not found"
    assert excinfo.value.source is ErrorSource.ATTRACTION_DIRECTORY


@pytest.mark.asyncio
async def test_missing_queue_is_named():
    estimator = WaitTimeEstimator(
        FakeAttractions(make_attraction(9)),
        FakeQueues(error=NotFoundError("gone", source=ErrorSource.QUEUE_STORE)),
    )

    with pytest.raises(NotFoundError) as excinfo:
        await estimator.estimate(9)

    assert excinfo.value.message == "Queue for attraction 9 not found"
    assert excinfo.value.source is ErrorSource.QUEUE_STORE


@pytest.mark.asyncio
async def test_other_upstream_failures_become_unavailable():
    estimator = WaitTimeEstimator(
        FakeAttractions(make_attraction(9)),
        FakeQueues(error=UpstreamUnavailableError("queue_store answered with status 502", source=ErrorSource.QUEUE_STORE)),
    )

    with pytest.raises(UpstreamUnavailableError) as excinfo:
        await estimator.estimate(9)

    assert excinfo.value.source is ErrorSource.QUEUE_STORE
    assert "status 502" in excinfo.value.message


@pytest.mark.asyncio
async def test_unexpected_exceptions_are_not_masked():
    estimator = WaitTimeEstimator(FakeAttractions(make_attraction(9)), FakeQueues(error=RuntimeError("boom")))

    with pytest.raises(RuntimeError, match="boom"):
        await estimator.estimate(9)


@pytest.mark.asyncio
async def test_slow_dependencies_time_out():
    estimator = WaitTimeEstimator(FakeAttractions(make_attraction(9)), FakeQueues({9: 1}, delay=1.0), timeout=0.05)

    with pytest.raises(UpstreamUnavailableError):
        await estimator.estimate(9)
