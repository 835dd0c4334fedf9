# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Workforce Core — FastAPI service (port 8005)
Resolves member roles and active shifts, enriches the member view with
schedule and location data, and applies single and bulk mutations against:
  - Identity service  (organization members, invitations, sessions)
  - Resource service  (shifts, schedules, geofences)
Also exposes /health and /metrics for Prometheus.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from workforce.controllers import (
    assignments_controller,
    catalog_controller,
    invitations_controller,
    members_controller,
    system_controller,
)
from workforce.core.config import settings
from workforce.core.dependencies import close_services, init_services
from workforce.core.errors import PreconditionError, ServiceError
from workforce.core.logging import get_logger
from workforce.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_services()
    logger.info("%s v%s starting", settings.SERVICE_NAME, settings.SERVICE_VERSION)
    yield
    await close_services()
    logger.info("%s shutting down", settings.SERVICE_NAME)


app = FastAPI(
    title="Workforce Core",
    description="Member roles, shift and location assignment, and bulk membership changes.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Exception handlers ────────────────────────────────────────────────────
@app.exception_handler(PreconditionError)
async def precondition_handler(request: Request, exc: PreconditionError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    req_id = getattr(request.state, "request_id", None)
    logger.warning("Upstream failure: %s", exc, extra={"request_id": req_id})
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "service": exc.service, "request_id": req_id},
    )


app.include_router(system_controller.router)
app.include_router(members_controller.router)
app.include_router(assignments_controller.router)
app.include_router(invitations_controller.router)
app.include_router(catalog_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.SERVICE_PORT)
