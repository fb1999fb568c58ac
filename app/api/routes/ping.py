from fastapi import APIRouter, HTTPException, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter(prefix="/ping", tags=["health"])


@router.get("", summary="Liveness probe")
async def ping() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready", summary="Readiness probe checking the database")
async def ready(request: Request) -> dict[str, str]:
    engine = getattr(request.app.state, "db_engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Database is not configured")
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
    except (OSError, SQLAlchemyError) as exc:
        raise HTTPException(status_code=503, detail="Database is unreachable") from exc
    return {"status": "ok"}
