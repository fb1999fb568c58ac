from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Response, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.dependencies.services import OrchestratorDep, TicketServiceDep
from app.tickets.models import Ticket
from app.tickets.state import TicketKind

router = APIRouter(tags=["tickets"])


class TicketIssueRequest(BaseModel):
    owner_id: int = Field(..., gt=0, validation_alias=AliasChoices("cpf", "owner_id"))
    kind: str = Field(..., min_length=1, validation_alias=AliasChoices("tipo", "kind"))
    initial_uses: int | None = Field(default=None, validation_alias=AliasChoices("valorInicial", "initial_uses"))


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    owner_id: int = Field(alias="cpf_usuario")
    kind: TicketKind = Field(alias="tipo")
    created_at: datetime = Field(alias="criado_em")
    valid_until: datetime | None = Field(alias="valido_ate")
    remaining_uses: int | None = Field(alias="acessos_restantes")


class ValidationRequest(BaseModel):
    attraction_id: int | None = Field(default=None, gt=0, validation_alias=AliasChoices("atracao_id", "attraction_id"))


class ValidationResponse(BaseModel):
    allowed: bool
    message: str
    cpf: int
    message_fila: str | None = None
    entitlement_consumed: bool = False


def _to_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse.model_validate(ticket)


@router.post("/Ingressos", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def issue_ticket(payload: TicketIssueRequest, service: TicketServiceDep) -> TicketResponse:
    ticket = await service.issue_ticket(
        owner_id=payload.owner_id,
        kind=payload.kind,
        initial_uses=payload.initial_uses,
    )
    return _to_response(ticket)


@router.get("/Ingressos", response_model=list[TicketResponse])
async def list_tickets(service: TicketServiceDep) -> list[TicketResponse]:
    tickets = await service.list_tickets()
    return [_to_response(ticket) for ticket in tickets]


@router.get("/Ingressos/usuario/{owner_id}", response_model=list[TicketResponse])
async def list_tickets_for_owner(owner_id: int, service: TicketServiceDep) -> list[TicketResponse]:
    tickets = await service.list_by_owner(owner_id)
    return [_to_response(ticket) for ticket in tickets]


@router.get("/Ingressos/{ticket_id}", response_model=TicketResponse)
async def get_ticket(ticket_id: str, service: TicketServiceDep) -> TicketResponse:
    ticket = await service.get_ticket(ticket_id)
    return _to_response(ticket)


@router.post("/Validar/{ticket_id}", response_model=ValidationResponse, response_model_exclude_none=True)
async def validate_ticket(
    ticket_id: str,
    response: Response,
    orchestrator: OrchestratorDep,
    payload: ValidationRequest | None = None,
) -> ValidationResponse:
    outcome = await orchestrator.admit(ticket_id, payload.attraction_id if payload else None)
    response.status_code = outcome.status_code
    return ValidationResponse(
        allowed=outcome.allowed,
        message=outcome.message,
        cpf=outcome.owner_id,
        message_fila=outcome.queue_message,
        entitlement_consumed=outcome.entitlement_consumed,
    )
