"""Exception handlers: convert domain failures into JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pawlink.errors import (
    AuthorizationError, LifecycleError, NotFoundError, PawLinkError, StoreError, ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[PawLinkError], int]] = [
    (AuthorizationError, 403),
    (ValidationError, 422),
    (NotFoundError, 404),
    (LifecycleError, 409),
    (StoreError, 503),
]


async def pawlink_error_handler(request: Request, exc: PawLinkError) -> JSONResponse:
    code = 500
    for error_type, mapped in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            code = mapped
            break

    content: dict = {"detail": exc.message or type(exc).__name__, "error": type(exc).__name__}
    if isinstance(exc, ValidationError) and exc.field:
        content["field"] = exc.field
    if isinstance(exc, StoreError):
        content["kind"] = exc.kind.value
        content["detail"] = "The rescue database is unavailable. Please try again."

    if code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    else:
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PawLinkError, pawlink_error_handler)
