"""Names and label sets of the metrics the admission services record."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class MetricDefinition:
    name: str
    metric_type: str
    description: str
    label_names: Tuple[str, ...] = ()


def _counter(name: str, description: str, *labels: str) -> MetricDefinition:
    return MetricDefinition(name, "counter", description, labels)


def _distribution(name: str, description: str, *labels: str) -> MetricDefinition:
    return MetricDefinition(name, "distribution", description, labels)


TICKET_VALIDATIONS = "ticket_validations_total"
TICKETS_ISSUED = "tickets_issued_total"
QUEUE_ADMISSIONS = "queue_admissions_total"
QUEUE_EXITS = "queue_exits_total"
ADMISSIONS = "admissions_total"
ENTITLEMENT_CONSUMED_WITHOUT_ADMISSION = "entitlement_consumed_without_admission_total"
UPSTREAM_FAILURES = "upstream_failures_total"
WAIT_ESTIMATE_DURATION = "wait_estimate_duration_seconds"


DEFAULT_METRIC_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    _counter(TICKET_VALIDATIONS, "Ticket validations by ticket kind and outcome.", "kind", "outcome"),
    _counter(TICKETS_ISSUED, "Tickets issued by kind.", "kind"),
    _counter(QUEUE_ADMISSIONS, "Queue entry attempts by outcome.", "outcome"),
    _counter(QUEUE_EXITS, "Queue exits by outcome.", "outcome"),
    _counter(ADMISSIONS, "Validate-then-enqueue runs by outcome.", "outcome"),
    _counter(ENTITLEMENT_CONSUMED_WITHOUT_ADMISSION, "Limited uses spent on runs whose queue step failed."),
    _counter(UPSTREAM_FAILURES, "Calls to collaborating services that timed out or failed.", "source"),
    _distribution(WAIT_ESTIMATE_DURATION, "Duration of wait-time estimates in seconds."),
)
