"""Process-wide logging and OpenTelemetry setup for the admission API."""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from app.core.config import Settings

# Loggers that stay quieter than the application level.
_NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite")

_active_provider: TracerProvider | None = None


def _parse_headers(raw: str | None) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` OTLP header strings."""

    pairs = (item.partition("=") for item in (raw or "").split(","))
    return {key.strip(): value.strip() for key, sep, value in pairs if sep and key.strip()}


def _logging_config(settings: Settings) -> dict[str, Any]:
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": settings.log_format}},
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "plain", "level": level},
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {name: {"level": max(level, logging.WARNING)} for name in _NOISY_LOGGERS},
    }


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply the logging configuration and return the application logger."""

    config = _logging_config(settings)
    dictConfig(config)
    logger = logging.getLogger(settings.app_name)
    logger.setLevel(config["root"]["level"])
    logger.debug("Logging configured for %s environment", settings.environment)
    return logger


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Install an OTLP/HTTP tracer provider when tracing is enabled.

    Spans opened through ``trace.get_tracer`` before this runs, or when tracing
    is disabled, go to the no-op provider. Only one provider is installed per
    process; later calls return ``None``.
    """

    global _active_provider

    if not settings.otel_enabled or _active_provider is not None:
        return None

    exporter_kwargs: dict[str, Any] = {"headers": _parse_headers(settings.otel_exporter_otlp_headers)}
    if settings.otel_exporter_otlp_endpoint:
        exporter_kwargs["endpoint"] = settings.otel_exporter_otlp_endpoint

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.otel_service_name,
                "deployment.environment": settings.environment,
            }
        )
    )
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**exporter_kwargs)))
    trace.set_tracer_provider(provider)
    _active_provider = provider
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    """Flush and stop a provider returned by :func:`init_tracer`."""

    global _active_provider

    if provider is None:
        return
    provider.shutdown()
    if provider is _active_provider:
        _active_provider = None
