"""Observability API endpoints.

Provides metrics, health checks, and readiness probes for monitoring.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from clearance.dependencies import get_blob_store
from database import get_db
from domain.documents.ports.object_storage_port import BlobStorePort
from .health import (
    check_database_health,
    check_blob_store_health,
    get_overall_health,
    HealthStatus,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Expose Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get("/health", summary="Health check endpoint")
def health_check(
    db: Session = Depends(get_db),
    store: BlobStorePort = Depends(get_blob_store),
):
    """Check database and blob store.

    Returns 200 OK if all components are healthy, 503 if any are unhealthy.
    """
    components = {
        "database": check_database_health(db),
        "blob_store": check_blob_store_health(store),
    }
    overall_status = get_overall_health(components)

    response_data = {
        "status": overall_status.value,
        "components": {
            name: {
                "status": comp.status.value,
                "message": comp.message,
                "latency_ms": comp.latency_ms,
            }
            for name, comp in components.items()
        }
    }

    status_code = 200 if overall_status != HealthStatus.UNHEALTHY else 503
    return JSONResponse(content=response_data, status_code=status_code)


@router.get("/ready", summary="Readiness check endpoint")
def readiness_check(db: Session = Depends(get_db)):
    """Ready to serve traffic once the database answers."""
    db_health = check_database_health(db)

    if db_health.status == HealthStatus.HEALTHY:
        return {"status": "ready"}
    return JSONResponse(
        content={"status": "not_ready", "message": db_health.message},
        status_code=503
    )
