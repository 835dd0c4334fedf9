# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints — health, readiness, metrics.
Pure HTTP layer — no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from workforce.core.config import settings
from workforce.core.dependencies import get_view_repo

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness probe for Docker and orchestration."""
    view_repo = get_view_repo()
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "cached_views": view_repo.count(),
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness probe — upstream services must be configured."""
    upstreams = {
        "identity": bool(settings.IDENTITY_SERVICE_URL),
        "resources": bool(settings.RESOURCE_SERVICE_URL),
        "notifications": bool(settings.NOTIFICATION_SERVICE_URL),
    }
    return {
        "status": "ready" if upstreams["identity"] and upstreams["resources"] else "degraded",
        "service": settings.SERVICE_NAME,
        "upstreams": upstreams,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
