from __future__ import annotations

from fastapi import APIRouter, status

from app.dependencies.services import QueueManagerDep
from app.queues.models import QueueEntry
from app.queues.schemas import QueueEntryResponse, QueueMembershipRequest

router = APIRouter(prefix="/Filas", tags=["queues"])


def _to_response(entry: QueueEntry) -> QueueEntryResponse:
    return QueueEntryResponse.model_validate(entry)


@router.post("/entrar", response_model=QueueEntryResponse, status_code=status.HTTP_201_CREATED)
async def enter_queue(payload: QueueMembershipRequest, manager: QueueManagerDep) -> QueueEntryResponse:
    entry = await manager.enter(payload.attraction_id, payload.user_id)
    return _to_response(entry)


@router.post("/sair")
async def exit_queue(payload: QueueMembershipRequest, manager: QueueManagerDep) -> dict[str, str]:
    await manager.exit(payload.attraction_id, payload.user_id)
    return {"detail": "User removed from the queue."}


@router.get("", response_model=list[QueueEntryResponse])
async def list_entries(manager: QueueManagerDep) -> list[QueueEntryResponse]:
    return [_to_response(entry) for entry in await manager.list_all()]


@router.get("/usuario/{user_id}", response_model=list[QueueEntryResponse])
async def list_entries_for_user(user_id: int, manager: QueueManagerDep) -> list[QueueEntryResponse]:
    return [_to_response(entry) for entry in await manager.list_by_user(user_id)]


@router.get("/atracao/{attraction_id}", response_model=list[QueueEntryResponse])
async def list_queue_for_attraction(attraction_id: int, manager: QueueManagerDep) -> list[QueueEntryResponse]:
    return [_to_response(entry) for entry in await manager.list_by_attraction(attraction_id)]


@router.get("/entrada/{entry_id}", response_model=QueueEntryResponse)
async def get_entry(entry_id: int, manager: QueueManagerDep) -> QueueEntryResponse:
    return _to_response(await manager.get_entry(entry_id))
