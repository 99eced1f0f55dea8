from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import cast

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from notes_backend.config import settings  # pyright: ignore[reportMissingTypeStubs]
from notes_backend.db import dispose_engine
from notes_backend.error_handlers import register_error_handlers
from notes_backend.routers import (  # pyright: ignore[reportMissingTypeStubs]
    ai,
    attachments,
    notes,
    notifications,
    share_links,
    shares,
    versions,
)
from notes_backend.scheduler import ReminderScheduler
from notes_backend.schemas import HealthResponse

APP_VERSION = "0.1.0"


class RequestIdMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app: ASGIApp = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id_header: bytes | None = None
        inbound_headers = cast(list[tuple[bytes, bytes]], scope.get("headers") or [])
        for key, value in inbound_headers:
            if key.lower() == b"x-request-id":
                value = value.strip()
                if value:
                    request_id_header = value[:128]
                break

        if request_id_header is None:
            request_id = str(uuid.uuid4())
            request_id_header = request_id.encode("ascii")
        else:
            # latin-1 is a 1-1 mapping for bytes -> str.
            request_id = request_id_header.decode("latin-1")

        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers = cast(list[tuple[bytes, bytes]], message.get("headers", []))
                headers = [(k, v) for (k, v) in headers if k.lower() != b"x-request-id"]
                headers.append((b"x-request-id", request_id_header))
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_wrapper)


logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

logger = logging.getLogger(__name__)
for msg in settings.security_warnings():
    logger.warning("SECURITY WARNING: %s", msg)


@asynccontextmanager
async def _lifespan(app_: FastAPI):
    scheduler = ReminderScheduler(interval_seconds=settings.reminder_sweep_interval_seconds)
    app_.state.reminder_scheduler = scheduler
    if settings.reminder_scheduler_enabled:
        scheduler.start()
    else:
        logger.info("reminder scheduler disabled (REMINDER_SCHEDULER_ENABLED=false)")
    try:
        yield
    finally:
        await scheduler.stop()
        # Ensure sqlite/aiosqlite worker threads don't keep the process alive.
        await dispose_engine()


app = FastAPI(title=settings.app_name, version=APP_VERSION, lifespan=_lifespan)

app.add_middleware(RequestIdMiddleware)
register_error_handlers(app)

origins = settings.cors_origins_list()
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Bearer auth only; no cookies cross-origin.
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=APP_VERSION)


for _router in (
    notes.router,
    attachments.router,
    shares.router,
    share_links.router,
    share_links.public_router,
    versions.router,
    notifications.router,
    ai.router,
):
    app.include_router(_router, prefix=settings.api_prefix)


@app.api_route(
    f"{settings.api_prefix.rstrip('/')}/{{path:path}}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    include_in_schema=False,
)
async def _api_fallback_not_found(path: str) -> None:  # noqa: ARG001
    # Unknown API paths get the JSON ErrorResponse 404, not a bare text one.
    raise HTTPException(status_code=404, detail="Not Found")


def _openapi_schema_ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _ensure_components_schema(schema: dict[str, object], *, name: str, model) -> None:  # type: ignore[no-untyped-def]
    components = cast(dict[str, object], schema.setdefault("components", {}))
    schemas = cast(dict[str, object], components.setdefault("schemas", {}))
    if name in schemas:
        return
    schemas[name] = model.model_json_schema(ref_template="#/components/schemas/{model}")


# Error statuses every API route can produce through the domain error taxonomy.
_DOCUMENTED_ERRORS: dict[str, str] = {
    "400": "Invalid argument",
    "401": "Missing or invalid token",
    "403": "Forbidden",
    "404": "Not found",
    "409": "Conflict",
    "410": "Gone (expired share link)",
    "503": "Unavailable (retryable)",
}


def _patch_openapi(schema: dict[str, object]) -> dict[str, object]:
    from notes_backend.schemas import ErrorResponse  # pyright: ignore[reportMissingTypeStubs]

    _ensure_components_schema(schema, name="ErrorResponse", model=ErrorResponse)

    api_prefix = settings.api_prefix.rstrip("/")
    paths = cast(dict[str, object], schema.get("paths") or {})

    for path, path_item_obj in paths.items():
        if not isinstance(path_item_obj, dict):
            continue
        path_item = cast(dict[str, object], path_item_obj)

        for method in ("get", "post", "put", "patch", "delete"):
            op_obj = path_item.get(method)
            if not isinstance(op_obj, dict):
                continue
            op = cast(dict[str, object], op_obj)
            responses = cast(dict[str, object], op.setdefault("responses", {}))

            # Document X-Request-Id response header (added by middleware).
            for resp_obj in responses.values():
                if not isinstance(resp_obj, dict):
                    continue
                headers = cast(dict[str, object], resp_obj.setdefault("headers", {}))
                headers.setdefault(
                    "X-Request-Id",
                    {
                        "schema": {"type": "string"},
                        "description": "Echoed or generated request id.",
                    },
                )

            if not path.startswith(api_prefix + "/"):
                continue

            error_content = {"application/json": {"schema": _openapi_schema_ref("ErrorResponse")}}
            for code, description in _DOCUMENTED_ERRORS.items():
                responses.setdefault(code, {"description": description, "content": error_content})
            # FastAPI's default 422 points at HTTPValidationError; ours is the envelope.
            if "422" in responses:
                resp_422 = cast(dict[str, object], responses["422"])
                resp_422["content"] = error_content

    return schema


def custom_openapi() -> dict[str, object]:
    if app.openapi_schema:
        return cast(dict[str, object], app.openapi_schema)

    schema = cast(
        dict[str, object],
        get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        ),
    )
    app.openapi_schema = _patch_openapi(schema)
    return cast(dict[str, object], app.openapi_schema)


app.openapi = custom_openapi  # type: ignore[method-assign]
