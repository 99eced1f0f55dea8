"""ErrorResponse rendering.

Every API error leaves as {error, message, request_id, details}. Domain errors
carry their own `error` code (`kind`); other HTTP errors are named from the
status code.
"""

from __future__ import annotations

import logging
from typing import cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notes_backend.errors import DomainError, UnavailableError
from notes_backend.schemas.errors import ErrorResponse

logger = logging.getLogger(__name__)

_STATUS_ERROR_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    410: "gone",
    413: "payload_too_large",
    422: "validation_error",
    503: "unavailable",
}


def error_code_for_status(status_code: int) -> str:
    return _STATUS_ERROR_CODES.get(status_code, f"http_{status_code}")


def _split_detail(detail: object) -> tuple[str, object | None]:
    # HTTPException.detail is either a plain message or {'message', 'details'}.
    if isinstance(detail, dict):
        message = detail.get("message")
        if isinstance(message, str):
            return message, detail.get("details")
        return "", detail
    if isinstance(detail, list):
        return "", detail
    return str(detail), None


def _render(
    request: Request,
    *,
    status_code: int,
    error: str,
    message: str,
    details: object | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        error=error,
        message=message,
        request_id=getattr(request.state, "request_id", None),
        details=details,
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(payload, exclude_none=True),
        headers=headers,
    )


async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    err = cast(DomainError, exc)
    message, details = _split_detail(err.detail)
    if isinstance(err, UnavailableError):
        logger.warning(
            "request unavailable request_id=%s path=%s: %s",
            getattr(request.state, "request_id", None),
            request.url.path,
            message,
        )
    return _render(
        request,
        status_code=err.status_code,
        error=err.kind,
        message=message or err.message,
        details=details,
        headers=getattr(err, "headers", None),
    )


async def _http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message, details = _split_detail(http_exc.detail)
    return _render(
        request,
        status_code=http_exc.status_code,
        error=error_code_for_status(http_exc.status_code),
        message=message or str(http_exc.detail),
        details=details,
        headers=getattr(http_exc, "headers", None),
    )


async def _validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _render(
        request,
        status_code=422,
        error="validation_error",
        message="Request validation error",
        details=validation_exc.errors(),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled exception request_id=%s method=%s path=%s",
        getattr(request.state, "request_id", None),
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return _render(request, status_code=500, error="internal_error", message="Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    # Starlette picks the most specific class along the MRO, so DomainError wins
    # over the generic HTTPException handler.
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
