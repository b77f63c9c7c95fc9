"""Pydantic schemas for clearance endpoints"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.documents.document_status import get_allowed_actions
from domain.documents.document_types import DocumentStatus, DocumentType
from models.clearance_record import ClearanceRecord


class ClearanceRecordResponse(BaseModel):
    """One clearance document of one student.

    Attributes:
        filename: Storage key of the submitted file (null while pending)
        original_filename: Sanitized name the file was uploaded under
        notified_admin: ID card handed in (true for submitted_physically/verified)
        allowed_actions: Actions the state machine accepts from this status
    """
    matric: str
    doc_type: DocumentType
    label: str
    status: DocumentStatus
    filename: Optional[str] = None
    original_filename: Optional[str] = None
    mime_type: Optional[str] = None
    notified_admin: bool = False
    allowed_actions: List[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: ClearanceRecord) -> "ClearanceRecordResponse":
        doc_type = record.document_type
        status = record.document_status
        return cls(
            matric=record.matric,
            doc_type=doc_type,
            label=doc_type.label,
            status=status,
            filename=record.file_ref,
            original_filename=record.original_filename,
            mime_type=record.mime_type,
            notified_admin=bool(record.notified_admin),
            allowed_actions=[a.value for a in get_allowed_actions(doc_type, status)],
            updated_at=record.updated_at,
        )


class ReadinessResponse(BaseModel):
    is_ready: bool


class StudentClearanceResponse(BaseModel):
    """Student dashboard: readiness, payment and all five documents."""
    matric: str
    email: Optional[str] = None
    certificate_ready: bool
    payment_confirmed: bool
    documents: List[ClearanceRecordResponse]


class RosterEntryResponse(BaseModel):
    matric: str
    email: Optional[str] = None
    payment_confirmed: bool
    certificate_ready: bool
    documents: List[ClearanceRecordResponse]


class QueueItemResponse(BaseModel):
    matric: str
    email: Optional[str] = None
    payment_confirmed: bool
    document: ClearanceRecordResponse


class UpdateStatusRequest(BaseModel):
    """Administrator status change.

    Attributes:
        new_status: verified, rejected, pending (reset) or
            submitted_physically (mark ID card handed in)
    """
    matric: str = Field(..., min_length=1, max_length=64)
    doc_type: DocumentType
    new_status: DocumentStatus


class ReconciliationReportResponse(BaseModel):
    """Outcome of a blob reconciliation sweep."""
    scanned: int
    referenced: int
    orphaned: int
    deleted: int
    skipped_recent: int
    failed: int
    dry_run: bool
    orphan_keys: List[str]
