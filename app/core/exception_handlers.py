"""Global exception handlers.

Every error body is JSON with either an "errors" map (field -> message) or a
"message" string. Stack traces and internal details never leave the process.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _field_name(loc: tuple | list) -> str:
    # loc looks like ("body", "email"), ("path", "user_id"), ("body",) or,
    # for unparseable JSON, ("body", <byte offset>)
    if len(loc) < 2 or (loc[0] == "body" and isinstance(loc[1], int)):
        return str(loc[0])
    return ".".join(str(p) for p in loc[1:])


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors: dict[str, str] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(error["loc"]), error["msg"])
    logger.warning(
        "Malformed request %s %s fields=%s",
        request.method,
        request.url.path,
        sorted(errors),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": errors},
    )


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
