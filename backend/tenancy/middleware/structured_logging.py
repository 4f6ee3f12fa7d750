# backend/tenancy/middleware/structured_logging.py
from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("tenancy.request")


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request with method, path, status_code, latency_ms and
    the dev identity headers. Registered inside RequestIDMiddleware so the
    formatter can attach the request id.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        t0 = time.perf_counter()

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": status_code,
                    "latency_ms": int((time.perf_counter() - t0) * 1000),
                    "org_slug": request.headers.get("X-Org-Slug"),
                    "user_email": request.headers.get("X-User-Email"),
                },
            )
