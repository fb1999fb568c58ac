"""Render domain and request-validation errors as structured JSON bodies."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({str(error["loc"][-1]) for error in exc.errors() if error.get("loc")})
    detail = f"Invalid or missing fields: {', '.join(fields)}" if fields else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"detail": detail, "code": ErrorCode.INVALID_INPUT.value, "source": None},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
