"""Health checks for the two resources every clearance operation touches:
the relational store and the document blob store.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Type

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.documents.ports.object_storage_port import BlobStorePort
from domain.errors import StorageError
from .logging_config import get_logger

logger = get_logger(__name__)

# Key that is never written; probing it exercises credentials and connectivity
_PROBE_KEY = "__healthcheck__/probe"

# A probe slower than this still works but marks the component degraded
SLOW_PROBE_MS = 1000.0


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def _probe(
    component: str,
    check: Callable[[], object],
    errors: Tuple[Type[Exception], ...],
) -> ComponentHealth:
    start = time.perf_counter()
    try:
        check()
    except errors as e:
        logger.error(f"{component} health check failed: {e}")
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"{component} error: {type(e).__name__}",
        )

    latency_ms = round((time.perf_counter() - start) * 1000, 2)
    if latency_ms > SLOW_PROBE_MS:
        logger.warning(f"{component} health check slow: {latency_ms}ms")
        return ComponentHealth(HealthStatus.DEGRADED, f"{component} slow", latency_ms)
    return ComponentHealth(HealthStatus.HEALTHY, f"{component} OK", latency_ms)


def check_database_health(db: Session) -> ComponentHealth:
    """Run SELECT 1 against the database."""
    return _probe("Database", lambda: db.execute(text("SELECT 1")), (SQLAlchemyError,))


def check_blob_store_health(store: BlobStorePort) -> ComponentHealth:
    """Existence check on a fixed key that is never written."""
    return _probe("Blob store", lambda: store.exists(_PROBE_KEY), (StorageError,))


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Unhealthy if any component is down, degraded if any is slow."""
    statuses = {c.status for c in components.values()}
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY
