# backend/tenancy/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .domain.errors import LifecycleError
from .logging_config import configure_logging

from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.health import router as health_router
from .routers.leases import router as leases_router
from .routers.evictions import router as evictions_router
from .routers.departures import router as departures_router
from .routers.deposits import router as deposits_router
from .routers.turnovers import router as turnovers_router
from .routers.offboarding import router as offboarding_router
from .routers.history import router as history_router

API_PREFIX = "/api"

log = logging.getLogger("tenancy.api")


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


async def _lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    if exc.http_status >= 500:
        log.error("lifecycle error: %s", exc.message)
    else:
        log.info("lifecycle error %s: %s", exc.code, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.as_dict())


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Tenancy Lifecycle",
        version=settings.app_version,
    )

    # added last runs first: request id wraps the request log line
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LifecycleError, _lifecycle_error_handler)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(leases_router, prefix=API_PREFIX)

    # Move-out
    app.include_router(evictions_router, prefix=API_PREFIX)
    app.include_router(departures_router, prefix=API_PREFIX)
    app.include_router(deposits_router, prefix=API_PREFIX)
    app.include_router(turnovers_router, prefix=API_PREFIX)

    # Orchestration + reporting
    app.include_router(offboarding_router, prefix=API_PREFIX)
    app.include_router(history_router, prefix=API_PREFIX)

    return app


app = create_app()
