"""
src/dentalcare/core/error_handlers.py

Unified exception handlers for the DentalCare FastAPI app.

All errors return:
    {
        "error": "<short message>",
        "request_id": "<uuid | null>",
        "code": <http_status_int>
    }

Stack traces are NEVER exposed in the response body.
They are logged server-side (ERROR level) for 5xx cases.
"""
from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dentalcare.core.errors import NotFoundError

_log = logging.getLogger("dentalcare.errors")

_PRODUCTION = os.getenv("ENV", "development").lower() in {"production", "prod"}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _err_body(message: str, code: int, request: Request) -> dict:
    return {
        "error": message,
        "request_id": _request_id(request),
        "code": code,
    }


def register_error_handlers(app: FastAPI) -> None:
    """Attach all unified error handlers to the given FastAPI app."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_err_body(str(exc), 404, request),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = str(exc.detail) if exc.detail else "Request error"
        if exc.status_code >= 500:
            _log.error(
                "HTTP %d %s path=%s",
                exc.status_code,
                detail,
                request.url.path,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_err_body(detail, exc.status_code, request),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        _log.warning("Validation error path=%s", request.url.path)
        body = _err_body("Invalid request body or parameters", 422, request)
        if not _PRODUCTION:
            body["detail"] = exc.errors()
        return JSONResponse(status_code=422, content=body)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        _log.exception("Unhandled exception path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=_err_body("Unexpected server error", 500, request),
        )
