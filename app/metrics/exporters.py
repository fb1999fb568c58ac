"""Render registry contents for external monitoring systems."""
from __future__ import annotations

import logging

from .registry import MetricsRegistry

logger = logging.getLogger(__name__)


class PrometheusExporter:
    """Generate Prometheus compatible text format output."""

    content_type = "text/plain; version=0.0.4; charset=utf-8"

    def __init__(self, registry: MetricsRegistry) -> None:
        self.registry = registry

    def build_payload(self) -> str:
        lines: list[str] = []
        for metric in self.registry.metrics():
            lines.append(f"# HELP {metric.name} {metric.description}")
            lines.append(f"# TYPE {metric.name} {metric.kind}")
            for label_values, values in sorted(metric.snapshot().items()):
                labels = ",".join(f'{name}="{value}"' for name, value in zip(metric.label_names, label_values))
                suffix = f"{{{labels}}}" if labels else ""
                if "value" in values:
                    lines.append(f"{metric.name}{suffix} {values['value']}")
                else:
                    lines.append(f"{metric.name}_count{suffix} {values['count']}")
                    lines.append(f"{metric.name}_sum{suffix} {values['sum']}")
        payload = "\n".join(lines) + "\n"
        logger.debug("Rendered %d metric lines", len(lines))
        return payload
