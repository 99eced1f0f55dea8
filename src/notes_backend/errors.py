"""Domain errors.

Each error is an HTTPException so FastAPI routes the raise straight into the
ErrorResponse envelope; `kind` is the stable `error` code clients branch on.
"""

from __future__ import annotations

from typing import ClassVar

from fastapi import HTTPException, status


class DomainError(HTTPException):
    kind: ClassVar[str] = "internal_error"
    status_code_default: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, details: object | None = None) -> None:
        detail: object = message
        if details is not None:
            detail = {"message": message, "details": details}
        super().__init__(status_code=self.status_code_default, detail=detail)
        self.message = message


class NotFoundError(DomainError):
    kind = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND


class GoneError(DomainError):
    kind = "gone"
    status_code_default = status.HTTP_410_GONE


class ForbiddenError(DomainError):
    kind = "forbidden"
    status_code_default = status.HTTP_403_FORBIDDEN


class InvalidArgumentError(DomainError):
    kind = "invalid_argument"
    status_code_default = status.HTTP_400_BAD_REQUEST


class ConflictError(DomainError):
    kind = "conflict"
    status_code_default = status.HTTP_409_CONFLICT


class UnavailableError(DomainError):
    """Retryable: lost a write race too many times, or a dependency timed out."""

    kind = "unavailable"
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE
