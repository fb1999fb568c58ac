"""Wire representation of queue entries shared by the routes and the HTTP client."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .models import QueueEntry


class QueueMembershipRequest(BaseModel):
    attraction_id: int = Field(..., gt=0, validation_alias=AliasChoices("atracao_id", "attraction_id"))
    user_id: int = Field(..., gt=0, validation_alias=AliasChoices("cpf_usuario", "user_id"))


class QueueEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    attraction_id: int = Field(alias="atracao_id")
    user_id: int = Field(alias="cpf_usuario")
    entered_at: datetime = Field(alias="entrou_em")

    def to_entry(self) -> QueueEntry:
        return QueueEntry(
            id=self.id,
            attraction_id=self.attraction_id,
            user_id=self.user_id,
            entered_at=self.entered_at,
        )
