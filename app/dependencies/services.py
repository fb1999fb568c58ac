from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request

from app.admission.orchestrator import AdmissionOrchestrator
from app.estimation.estimator import WaitTimeEstimator
from app.queues.service import QueueAdmissionManager
from app.tickets.service import TicketService


def _from_state(request: Request, name: str, label: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{label} is not configured")
    return service


async def get_ticket_service(request: Request) -> TicketService:
    return _from_state(request, "ticket_service", "Ticket service")


async def get_admission_orchestrator(request: Request) -> AdmissionOrchestrator:
    return _from_state(request, "admission_orchestrator", "Admission orchestrator")


async def get_queue_manager(request: Request) -> QueueAdmissionManager:
    return _from_state(request, "queue_manager", "Queue service")


async def get_wait_time_estimator(request: Request) -> WaitTimeEstimator:
    return _from_state(request, "wait_time_estimator", "Wait-time estimator")


TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
OrchestratorDep = Annotated[AdmissionOrchestrator, Depends(get_admission_orchestrator)]
QueueManagerDep = Annotated[QueueAdmissionManager, Depends(get_queue_manager)]
EstimatorDep = Annotated[WaitTimeEstimator, Depends(get_wait_time_estimator)]
