from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.core.errors import ErrorSource, UpstreamUnavailableError

from .base import ServiceClient


class AttractionSnapshot(BaseModel):
    """Read-only view of an attraction as published by the directory."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: int
    name: str = Field(default="", alias="nome")
    capacity: int = Field(alias="capacidade")
    avg_service_time: int = Field(alias="tempo_medio")
    status: str = Field(default="")

    def is_operational(self, operational_label: str) -> bool:
        return self.status.strip().casefold() == operational_label.strip().casefold()


class AttractionDirectoryClient(ServiceClient):
    """Lookups against the attraction directory."""

    source = ErrorSource.ATTRACTION_DIRECTORY

    async def get_attraction(self, attraction_id: int) -> AttractionSnapshot:
        data = await self._request(
            "GET",
            f"/Atracoes/{attraction_id}",
            not_found=f"Attraction {attraction_id} not found in the attraction directory",
        )
        try:
            return AttractionSnapshot.model_validate(data)
        except ValidationError as exc:
            raise UpstreamUnavailableError(
                f"Attraction directory returned an unexpected payload for {attraction_id}",
                source=self.source,
            ) from exc
