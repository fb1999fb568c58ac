from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from app.core.errors import DomainError, ErrorSource, UpstreamUnavailableError, error_from_code
from app.metrics import metrics_registry
from app.metrics.definitions import UPSTREAM_FAILURES

logger = logging.getLogger(__name__)


def _error_body(response: httpx.Response) -> Mapping[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {"detail": response.text} if response.text else {}
    if isinstance(data, Mapping):
        return data
    return {}


def _source_from(value: Any, default: ErrorSource) -> ErrorSource:
    try:
        return ErrorSource(value)
    except ValueError:
        return default


class ServiceClient:
    """Async JSON client for one collaborating service.

    Failures are translated into the domain error taxonomy: structured bodies
    (``{"detail", "code", "source"}``) are honoured as-is, otherwise the HTTP
    status decides the error kind. Transport errors and timeouts become
    :class:`UpstreamUnavailableError`.
    """

    source: ErrorSource

    def __init__(self, base_url: str, *, http: httpx.AsyncClient) -> None:
        self.base_url = base_url
        self._http = http

    async def _request(self, method: str, path: str, *, not_found: str | None = None, **kwargs: Any) -> Any:
        url = self._build_url(path)
        try:
            response = await self._http.request(method, url, headers={"Accept": "application/json"}, **kwargs)
        except httpx.TimeoutException as exc:
            self._record_failure()
            raise UpstreamUnavailableError(
                f"{self.source.value} did not answer {method} {path} in time", source=self.source
            ) from exc
        except httpx.HTTPError as exc:
            self._record_failure()
            raise UpstreamUnavailableError(f"Could not reach {self.source.value}: {exc}", source=self.source) from exc

        if response.status_code >= 400:
            raise self._to_error(response, not_found=not_found)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(
                f"{self.source.value} returned a non-JSON body for {path}", source=self.source
            ) from exc

    def _to_error(self, response: httpx.Response, *, not_found: str | None) -> DomainError:
        body = _error_body(response)
        error_cls = error_from_code(body.get("code"), response.status_code)
        if error_cls is UpstreamUnavailableError and "code" not in body:
            self._record_failure()
            logger.warning("%s answered %s %s", self.source.value, response.status_code, response.request.url)
            return UpstreamUnavailableError(
                f"{self.source.value} answered with status {response.status_code}", source=self.source
            )

        detail = body.get("detail")
        message = detail if isinstance(detail, str) and detail else None
        if message is None and response.status_code == 404 and not_found:
            message = not_found
        source = _source_from(body.get("source"), self.source)
        return error_cls(message or f"{self.source.value} rejected the request", source=source)

    def _record_failure(self) -> None:
        metrics_registry.counter(UPSTREAM_FAILURES).inc(source=self.source.value)

    def _build_url(self, path: str) -> str:
        normalized = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url.rstrip('/')}{normalized}"
