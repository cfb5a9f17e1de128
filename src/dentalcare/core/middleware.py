"""
src/dentalcare/core/middleware.py

Request id + access log.

A client-supplied X-Request-ID is reused when it is a short token of safe
characters; anything else is replaced by a fresh UUID4 so it can be logged and
echoed without escaping. Health check traffic (/health/*) is logged at DEBUG so
readiness polling does not drown the access log.
"""
from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from dentalcare.core.logging import request_id_ctx

_log = logging.getLogger("dentalcare.access")

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")
_QUIET_PREFIX = "/health/"


def resolve_request_id(raw: str | None) -> str:
    candidate = (raw or "").strip()
    return candidate if _REQUEST_ID_RE.match(candidate) else str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get("X-Request-ID"))
        token = request_id_ctx.set(request_id)
        request.state.request_id = request_id

        path = request.url.path
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            _log.error(
                "%s %s failed after %.2fms",
                request.method,
                path,
                (time.perf_counter() - start) * 1000.0,
                extra={"method": request.method, "path": path},
            )
            raise
        finally:
            request_id_ctx.reset(token)

        duration_ms = round((time.perf_counter() - start) * 1000.0, 2)
        response.headers["X-Request-ID"] = request_id

        level = logging.DEBUG if path.startswith(_QUIET_PREFIX) else logging.INFO
        _log.log(
            level,
            "%s %s %d %.2fms",
            request.method,
            path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
