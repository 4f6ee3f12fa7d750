# backend/tenancy/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# caller-supplied ids end up in every log line, keep them short and printable
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


def get_request_id() -> str | None:
    return request_id_ctx.get()


def accept_request_id(raw: str | None) -> str:
    """Caller id when it is well formed, otherwise a fresh uuid4."""
    val = (raw or "").strip()
    if val and _SAFE_ID.match(val):
        return val
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # starlette headers are case-insensitive
        rid = accept_request_id(request.headers.get(self.header_name))
        request.state.request_id = rid

        token = request_id_ctx.set(rid)
        try:
            resp = await call_next(request)
            resp.headers[self.header_name] = rid
            return resp
        finally:
            request_id_ctx.reset(token)
