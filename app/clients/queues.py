from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from app.core.errors import ErrorSource, UpstreamUnavailableError
from app.queues.models import QueueEntry
from app.queues.schemas import QueueEntryResponse

from .base import ServiceClient


class QueueServiceClient(ServiceClient):
    """Remote access to the queue admission service."""

    source = ErrorSource.QUEUE_STORE

    async def enter(self, attraction_id: int, user_id: int) -> QueueEntry:
        data = await self._request(
            "POST",
            "/Filas/entrar",
            json={"atracao_id": attraction_id, "cpf_usuario": user_id},
        )
        return self._parse(data)

    async def list_for_attraction(self, attraction_id: int) -> list[QueueEntry]:
        data = await self._request(
            "GET",
            f"/Filas/atracao/{attraction_id}",
            not_found=f"Queue for attraction {attraction_id} not found",
        )
        if not isinstance(data, list):
            raise UpstreamUnavailableError(
                f"Queue service returned an unexpected payload for attraction {attraction_id}",
                source=self.source,
            )
        return [self._parse(item) for item in data]

    def _parse(self, data: Any) -> QueueEntry:
        try:
            return QueueEntryResponse.model_validate(data).to_entry()
        except ValidationError as exc:
            raise UpstreamUnavailableError("Queue service returned a malformed entry", source=self.source) from exc
