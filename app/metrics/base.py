"""Counter and distribution primitives held by the metrics registry."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock
from time import perf_counter
from typing import Iterable, Iterator, Mapping, Tuple

LabelValues = Tuple[str, ...]


class Metric(ABC):
    """Named metric keyed by an ordered tuple of label values."""

    kind: str = "untyped"

    def __init__(self, name: str, *, description: str = "", label_names: Iterable[str] | None = None) -> None:
        self.name = name
        self.description = description
        self.label_names: LabelValues = tuple(label_names or ())
        self._lock = Lock()

    def _key(self, labels: Mapping[str, str]) -> LabelValues:
        unknown = set(labels) - set(self.label_names)
        if unknown:
            raise ValueError(f"Metric '{self.name}' got unexpected labels {sorted(unknown)}")
        missing = [label for label in self.label_names if label not in labels]
        if missing:
            raise ValueError(f"Metric '{self.name}' requires labels {missing}")
        return tuple(str(labels[label]) for label in self.label_names)

    @abstractmethod
    def snapshot(self) -> Mapping[LabelValues, Mapping[str, float]]:
        """Return a copy of the current values per label set."""


class CounterMetric(Metric):
    """Monotonic counter."""

    kind = "counter"

    def __init__(self, name: str, *, description: str = "", label_names: Iterable[str] | None = None) -> None:
        super().__init__(name, description=description, label_names=label_names)
        self._values: dict[LabelValues, float] = defaultdict(float)

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        if amount < 0:
            raise ValueError("Counters can only increase")
        key = self._key(labels)
        with self._lock:
            self._values[key] += amount

    def value(self, **labels: str) -> float:
        key = self._key(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def snapshot(self) -> Mapping[LabelValues, Mapping[str, float]]:
        with self._lock:
            return {key: {"value": value} for key, value in self._values.items()}


@dataclass
class _Summary:
    count: int = 0
    total: float = 0.0
    maximum: float = 0.0

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.maximum = max(self.maximum, value)


class DistributionMetric(Metric):
    """Count, sum and maximum of observed values."""

    kind = "summary"

    def __init__(self, name: str, *, description: str = "", label_names: Iterable[str] | None = None) -> None:
        super().__init__(name, description=description, label_names=label_names)
        self._values: dict[LabelValues, _Summary] = defaultdict(_Summary)

    def observe(self, value: float, **labels: str) -> None:
        key = self._key(labels)
        with self._lock:
            self._values[key].add(value)

    @contextmanager
    def time(self, **labels: str) -> Iterator[None]:
        started = perf_counter()
        try:
            yield
        finally:
            self.observe(perf_counter() - started, **labels)

    def snapshot(self) -> Mapping[LabelValues, Mapping[str, float]]:
        with self._lock:
            return {
                key: {"count": float(summary.count), "sum": summary.total, "max": summary.maximum}
                for key, summary in self._values.items()
            }
