"""Process-local counters and timings for the admission services."""
from .definitions import DEFAULT_METRIC_DEFINITIONS, MetricDefinition
from .exporters import PrometheusExporter
from .registry import MetricsRegistry

metrics_registry = MetricsRegistry()


def register_default_metrics(registry: MetricsRegistry | None = None) -> MetricsRegistry:
    """Create every known metric so the exporter lists them before first use."""
    target = registry if registry is not None else metrics_registry
    factories = {"counter": target.counter, "distribution": target.distribution}
    for definition in DEFAULT_METRIC_DEFINITIONS:
        factory = factories.get(definition.metric_type)
        if factory is None:
            raise ValueError(f"Metric '{definition.name}' has unknown type {definition.metric_type!r}")
        factory(definition.name, description=definition.description, label_names=definition.label_names)
    return target


register_default_metrics()

__all__ = [
    "MetricDefinition",
    "MetricsRegistry",
    "PrometheusExporter",
    "metrics_registry",
    "register_default_metrics",
]
