"""Administrator endpoints: roster, review queues, status changes, blob sweep"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Query

from auth.dependencies import AdminSession
from domain.documents.document_types import DocumentStatus
from .dependencies import ClearanceServiceDep, ReadinessDep, ReconcilerDep
from .readiness import QueueItem
from .schemas import (
    ClearanceRecordResponse,
    QueueItemResponse,
    ReconciliationReportResponse,
    RosterEntryResponse,
    UpdateStatusRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Administration"])


def _queue_response(items: List[QueueItem]) -> List[QueueItemResponse]:
    return [
        QueueItemResponse(
            matric=item.matric,
            email=item.email,
            payment_confirmed=item.payment_confirmed,
            document=ClearanceRecordResponse.from_record(item.record),
        )
        for item in items
    ]


@router.get("/students", response_model=List[RosterEntryResponse])
def list_students(session: AdminSession, readiness: ReadinessDep):
    """All student accounts with their clearance records."""
    return [
        RosterEntryResponse(
            matric=entry.matric,
            email=entry.email,
            payment_confirmed=entry.payment_confirmed,
            certificate_ready=entry.certificate_ready,
            documents=[ClearanceRecordResponse.from_record(r) for r in entry.documents],
        )
        for entry in readiness.admin_roster(session)
    ]


@router.get("/queues/receipts", response_model=List[QueueItemResponse])
def receipts_queue(
    session: AdminSession,
    readiness: ReadinessDep,
    status: Optional[DocumentStatus] = Query(None, description="Filter by record status"),
):
    """Certificate payment receipts."""
    return _queue_response(readiness.receipts_queue(session, status))


@router.get("/queues/id-cards", response_model=List[QueueItemResponse])
def id_card_queue(
    session: AdminSession,
    readiness: ReadinessDep,
    status: Optional[DocumentStatus] = Query(None, description="Filter by record status"),
):
    """Physical ID card submissions."""
    return _queue_response(readiness.id_card_queue(session, status))


@router.get("/queues/documents", response_model=List[QueueItemResponse])
def documents_queue(
    session: AdminSession,
    readiness: ReadinessDep,
    status: Optional[DocumentStatus] = Query(None, description="Filter by record status"),
):
    """Statement of result, school fees receipt and clearance form."""
    return _queue_response(readiness.documents_queue(session, status))


@router.post("/update-status", response_model=ClearanceRecordResponse)
def update_status(body: UpdateStatusRequest, session: AdminSession, service: ClearanceServiceDep):
    """Verify, reject, reset, or mark an ID card as handed in.

    Raises:
        IllegalTransitionError: Rendered as 409 with the current status
    """
    record = service.admin_update_status(session, body.matric, body.doc_type, body.new_status)
    return ClearanceRecordResponse.from_record(record)


@router.post("/reconcile-blobs", response_model=ReconciliationReportResponse)
def reconcile_blobs(
    session: AdminSession,
    reconciler: ReconcilerDep,
    dry_run: bool = Query(True, description="Report orphans without deleting them"),
):
    """Delete stored files no clearance record references any more."""
    logger.info(f"Blob sweep requested: by={session.matric}, dry_run={dry_run}")
    report = reconciler.sweep(dry_run=dry_run)
    return ReconciliationReportResponse(
        scanned=report.scanned,
        referenced=report.referenced,
        orphaned=report.orphaned,
        deleted=report.deleted,
        skipped_recent=report.skipped_recent,
        failed=report.failed,
        dry_run=report.dry_run,
        orphan_keys=report.orphan_keys,
    )
