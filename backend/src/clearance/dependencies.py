"""FastAPI dependencies for the clearance endpoints"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from config import get_settings
from database import get_db
from domain.documents.ports.object_storage_port import BlobStorePort
from infrastructure.storage.storage_config import build_blob_store
from .readiness import ReadinessAggregator
from .reconciliation import BlobReconciler
from .service import ClearanceService


@lru_cache()
def get_blob_store() -> BlobStorePort:
    """Blob store adapter selected by STORAGE_BACKEND, built once per process."""
    return build_blob_store()


def get_clearance_service(
    db: Annotated[Session, Depends(get_db)],
    blob_store: Annotated[BlobStorePort, Depends(get_blob_store)],
) -> ClearanceService:
    return ClearanceService(db, blob_store, get_settings())


def get_readiness_aggregator(
    db: Annotated[Session, Depends(get_db)],
) -> ReadinessAggregator:
    return ReadinessAggregator(db)


def get_blob_reconciler(
    db: Annotated[Session, Depends(get_db)],
    blob_store: Annotated[BlobStorePort, Depends(get_blob_store)],
) -> BlobReconciler:
    return BlobReconciler(db, blob_store, grace_minutes=get_settings().ORPHAN_GRACE_MINUTES)


ClearanceServiceDep = Annotated[ClearanceService, Depends(get_clearance_service)]
ReadinessDep = Annotated[ReadinessAggregator, Depends(get_readiness_aggregator)]
ReconcilerDep = Annotated[BlobReconciler, Depends(get_blob_reconciler)]
