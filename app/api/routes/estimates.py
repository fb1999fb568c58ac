from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies.services import EstimatorDep

router = APIRouter(prefix="/Estimativa", tags=["estimates"])


class WaitEstimateResponse(BaseModel):
    atracao_id: int
    nome_atracao: str
    status_atracao: str
    pessoas_na_fila: int
    tempo_estimado_minutos: int


@router.get("/atracao/{attraction_id}", response_model=WaitEstimateResponse)
async def estimate_wait(attraction_id: int, estimator: EstimatorDep) -> WaitEstimateResponse:
    estimate = await estimator.estimate(attraction_id)
    return WaitEstimateResponse(
        atracao_id=estimate.attraction_id,
        nome_atracao=estimate.attraction_name,
        status_atracao=estimate.attraction_status,
        pessoas_na_fila=estimate.queue_length,
        tempo_estimado_minutos=estimate.estimated_minutes,
    )
