"""Domain error taxonomy shared by every park service."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable error codes carried in structured error bodies."""

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    FORBIDDEN = "FORBIDDEN"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class ErrorSource(str, Enum):
    """Component that produced an error, used to aid diagnosis."""

    TICKET_STORE = "ticket_store"
    QUEUE_STORE = "queue_store"
    USER_REGISTRY = "user_registry"
    ATTRACTION_DIRECTORY = "attraction_directory"


class DomainError(Exception):
    """Base domain error with code, HTTP status and user-safe message."""

    code: ErrorCode = ErrorCode.INVALID_INPUT
    status_code: int = 400

    def __init__(self, message: str, *, source: ErrorSource | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.source = source

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> dict[str, str | None]:
        return {
            "detail": self.message,
            "code": self.code.value,
            "source": self.source.value if self.source else None,
        }


class InvalidInputError(DomainError):
    """Raised for malformed or missing request fields."""

    code = ErrorCode.INVALID_INPUT
    status_code = 400


class NotFoundError(DomainError):
    """Raised when a ticket, attraction, queue entry or user does not exist."""

    code = ErrorCode.NOT_FOUND
    status_code = 404


class ConflictError(DomainError):
    """Raised on duplicate queue entries."""

    code = ErrorCode.CONFLICT
    status_code = 409


class ForbiddenError(DomainError):
    """Raised when an attraction is not operational or access is denied."""

    code = ErrorCode.FORBIDDEN
    status_code = 403


class UpstreamUnavailableError(DomainError):
    """Raised when a dependency times out or answers with a server error."""

    code = ErrorCode.UPSTREAM_UNAVAILABLE
    status_code = 500


class ConfigurationError(DomainError):
    """Raised when upstream data makes a computation undefined."""

    code = ErrorCode.CONFIGURATION_ERROR
    status_code = 500


_ERRORS_BY_CODE: dict[str, type[DomainError]] = {
    cls.code.value: cls
    for cls in (
        InvalidInputError,
        NotFoundError,
        ConflictError,
        ForbiddenError,
        UpstreamUnavailableError,
        ConfigurationError,
    )
}

_ERRORS_BY_STATUS: dict[int, type[DomainError]] = {
    400: InvalidInputError,
    404: NotFoundError,
    409: ConflictError,
    403: ForbiddenError,
    422: InvalidInputError,
}


def error_from_code(code: str | None, status_code: int) -> type[DomainError]:
    """Resolve the error class for a structured error body or bare HTTP status."""

    if code in _ERRORS_BY_CODE:
        return _ERRORS_BY_CODE[code]
    if status_code >= 500:
        return UpstreamUnavailableError
    return _ERRORS_BY_STATUS.get(status_code, UpstreamUnavailableError)


__all__ = [
    "ConfigurationError",
    "ConflictError",
    "DomainError",
    "ErrorCode",
    "ErrorSource",
    "ForbiddenError",
    "InvalidInputError",
    "NotFoundError",
    "UpstreamUnavailableError",
    "error_from_code",
]
