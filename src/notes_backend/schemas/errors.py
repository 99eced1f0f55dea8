from __future__ import annotations

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error envelope shared by every API route.

    `error` is a stable machine code (not_found, gone, forbidden, ...);
    `message` is human readable; `details` is optional structured context.
    """

    error: str
    message: str
    request_id: str | None = None
    details: object | None = None
