import logging

from app.core.config import Settings
from app.core.logging import _parse_headers, configure_logging, init_tracer


def test_parse_headers_skips_malformed_items():
    assert _parse_headers("api-key=abc, x-team = park ,broken,") == {"api-key": "abc", "x-team": "park"}
    assert _parse_headers(None) == {}


def test_configure_logging_quiets_http_client():
    logger = configure_logging(Settings(_env_file=None, log_level="debug", app_name="park-test"))

    assert logger.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_tracer_is_not_installed_when_disabled():
    assert init_tracer(Settings(_env_file=None, otel_enabled=False)) is None
