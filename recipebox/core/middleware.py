# recipebox/core/middleware.py
from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from recipebox.core.logging import request_id_var

log = logging.getLogger("recipebox.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One access-log line per request, plus a request id that every log record
    emitted while serving it carries (see RequestIdFilter).
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        start = time.perf_counter()

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            fields = {
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            }
            level = logging.WARNING if status_code >= 500 else logging.INFO
            log.log(level, "request", extra=fields)
            request_id_var.reset(token)
