"""Validate-then-enqueue composition across the ticket and queue services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from opentelemetry import trace

from app.core.errors import DomainError
from app.metrics import metrics_registry
from app.metrics.definitions import ADMISSIONS, ENTITLEMENT_CONSUMED_WITHOUT_ADMISSION
from app.queues.models import QueueEntry
from app.tickets.validator import TicketValidator

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

VALIDATED_ONLY_MESSAGE = "No queue requested; ticket validated only."
QUEUED_MESSAGE = "User added to the queue."


class QueueAdmission(Protocol):
    async def enter(self, attraction_id: int, user_id: int) -> QueueEntry:
        ...


@dataclass(slots=True)
class AdmissionOutcome:
    """Externally observed result of one admission attempt."""

    allowed: bool
    message: str
    owner_id: int
    status_code: int
    queue_message: str | None = None
    entitlement_consumed: bool = False
    queue_entry: QueueEntry | None = None


class AdmissionOrchestrator:
    """Run ticket validation and, when requested, queue admission.

    The two steps live in stores with no shared transaction. A limited use
    spent by the validator stays spent when the queue step then fails: the
    outcome is reported as not allowed with ``entitlement_consumed=True`` and
    the gap is logged and counted. The queue step is attempted once.
    """

    def __init__(self, validator: TicketValidator, queue: QueueAdmission) -> None:
        self._validator = validator
        self._queue = queue

    async def admit(
        self,
        ticket_id: str,
        attraction_id: int | None = None,
        *,
        now: datetime | None = None,
    ) -> AdmissionOutcome:
        with tracer.start_as_current_span("admission.admit") as span:
            span.set_attribute("ticket.id", ticket_id)
            if attraction_id is not None:
                span.set_attribute("attraction.id", attraction_id)

            decision = await self._validator.validate(ticket_id, now=now)
            if not decision.allowed:
                self._record("rejected")
                return AdmissionOutcome(
                    allowed=False,
                    message=decision.message,
                    owner_id=decision.owner_id,
                    status_code=403,
                )

            if attraction_id is None:
                self._record("validated")
                return AdmissionOutcome(
                    allowed=True,
                    message=decision.message,
                    owner_id=decision.owner_id,
                    status_code=200,
                    queue_message=VALIDATED_ONLY_MESSAGE,
                    entitlement_consumed=decision.entitlement_consumed,
                )

            try:
                entry = await self._queue.enter(attraction_id, decision.owner_id)
            except DomainError as exc:
                self._record("queue_failed")
                span.set_attribute("admission.queue_error", exc.code.value)
                if decision.entitlement_consumed:
                    span.set_attribute("admission.entitlement_consumed", True)
                    metrics_registry.counter(ENTITLEMENT_CONSUMED_WITHOUT_ADMISSION).inc()
                    logger.warning(
                        "Ticket %s spent a use but queue admission to attraction %s failed: %s",
                        ticket_id,
                        attraction_id,
                        exc.message,
                    )
                return AdmissionOutcome(
                    allowed=False,
                    message=exc.message,
                    owner_id=decision.owner_id,
                    status_code=exc.status_code,
                    entitlement_consumed=decision.entitlement_consumed,
                )

            self._record("queued")
            return AdmissionOutcome(
                allowed=True,
                message=decision.message,
                owner_id=decision.owner_id,
                status_code=200,
                queue_message=QUEUED_MESSAGE,
                entitlement_consumed=decision.entitlement_consumed,
                queue_entry=entry,
            )

    @staticmethod
    def _record(outcome: str) -> None:
        metrics_registry.counter(ADMISSIONS).inc(outcome=outcome)
