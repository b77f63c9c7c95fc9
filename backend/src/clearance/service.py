"""Clearance service: every state machine operation on a document record.

Each operation follows the same sequence:
1. Gate the session (role capability and, for students, ownership)
2. Load the current record (materializing the student's records if needed)
3. Resolve the transition; illegal pairs raise before anything is written
4. Write the new status and commit

Uploads additionally validate the file and store the blob before step 4.
The blob write and the status write are separate resources; if the status
write fails the blob is left orphaned for the reconciliation sweep.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth.gate import ClearanceSession, authorize_action, authorize_read, require_admin
from auth.roles import UserRole
from config import Settings, get_settings
from domain.documents.document_status import ClearanceAction, next_status
from domain.documents.document_types import DocumentStatus, DocumentType
from domain.documents.ports.object_storage_port import BlobMetadata, BlobStorePort
from domain.documents.validation import validate_upload
from domain.errors import (
    ForbiddenError,
    IllegalTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from infrastructure.repositories.clearance_repository import ClearanceRecordStore
from infrastructure.repositories.student_repository import StudentRepository
from models.clearance_record import ClearanceRecord
from models.student import Student
from observability.metrics import (
    clearance_transitions_total,
    orphaned_blobs_total,
    upload_rejections_total,
    upload_size_bytes,
)

logger = logging.getLogger(__name__)


@dataclass
class DocumentFile:
    """Stored content of a submitted document."""
    content: bytes
    mime_type: str
    filename: str


class ClearanceService:
    """State machine operations for clearance records.

    All methods take the caller's ClearanceSession explicitly. The service
    keeps no state between calls beyond its database session.
    """

    def __init__(self, db: Session, blob_store: BlobStorePort, settings: Optional[Settings] = None):
        self.db = db
        self.blob_store = blob_store
        self.settings = settings or get_settings()
        self.records = ClearanceRecordStore(db)
        self.students = StudentRepository(db)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_student(self, matric: str) -> Student:
        """Administrators have no clearance records, so they count as unknown."""
        student = self.students.get(matric)
        if student.role != UserRole.STUDENT.value:
            raise NotFoundError(f"Student {matric} not found")
        return student

    def _load(self, matric: str, doc_type: DocumentType) -> ClearanceRecord:
        self._require_student(matric)
        self.records.ensure_records(matric)
        return self.records.get_record(matric, doc_type)

    def _authorize(
        self,
        session: ClearanceSession,
        matric: str,
        doc_type: DocumentType,
        action: ClearanceAction,
    ) -> None:
        try:
            authorize_action(session, matric, action)
        except ForbiddenError:
            clearance_transitions_total.labels(
                action=action.value, doc_type=doc_type.value, outcome="forbidden"
            ).inc()
            raise

    def _resolve(self, record: ClearanceRecord, action: ClearanceAction) -> DocumentStatus:
        try:
            return next_status(record.document_type, record.document_status, action)
        except IllegalTransitionError:
            clearance_transitions_total.labels(
                action=action.value, doc_type=record.doc_type, outcome="illegal"
            ).inc()
            logger.info(
                f"Illegal transition: matric={record.matric}, doc_type={record.doc_type}, "
                f"status={record.status}, action={action.value}",
                extra={
                    "matric": record.matric,
                    "doc_type": record.doc_type,
                    "action": action.value,
                    "from_status": record.status,
                },
            )
            raise

    def _commit(self, matric: str, doc_type: DocumentType, action: ClearanceAction) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            clearance_transitions_total.labels(
                action=action.value, doc_type=doc_type.value, outcome="error"
            ).inc()
            logger.error(
                f"Commit failed: matric={matric}, doc_type={doc_type.value}, "
                f"action={action.value}, error={e}"
            )
            raise StorageError(f"Failed to save {doc_type.value} record for {matric}") from e

    def _applied(
        self,
        matric: str,
        doc_type: DocumentType,
        action: ClearanceAction,
        from_status: str,
        to_status: DocumentStatus,
        session: ClearanceSession,
    ) -> ClearanceRecord:
        outcome = "noop" if from_status == to_status.value else "applied"
        clearance_transitions_total.labels(
            action=action.value, doc_type=doc_type.value, outcome=outcome
        ).inc()
        logger.info(
            f"Clearance {action.value} {outcome}: matric={matric}, doc_type={doc_type.value}, "
            f"{from_status} -> {to_status.value}, by={session.matric}",
            extra={
                "matric": matric,
                "doc_type": doc_type.value,
                "action": action.value,
                "from_status": from_status,
                "to_status": to_status.value,
            },
        )
        return self.records.get_record(matric, doc_type)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_clearance(self, session: ClearanceSession, matric: str):
        """Return all five records of a student, creating them on first access.

        Raises:
            ForbiddenError: If a student asks for another student's records
            NotFoundError: If the matric is not a provisioned student
        """
        authorize_read(session, matric)
        self._require_student(matric)
        return self.records.ensure_records(matric)

    def read_document(self, session: ClearanceSession, matric: str, doc_type: DocumentType) -> DocumentFile:
        """Fetch the submitted file of a record for viewing or download.

        Raises:
            NotFoundError: If the record carries no file or the blob is gone
        """
        authorize_read(session, matric)
        record = self._load(matric, doc_type)
        if not record.file_ref:
            raise NotFoundError(f"No file submitted for {doc_type.value} of {matric}")

        content = self.blob_store.read(record.file_ref)
        return DocumentFile(
            content=content,
            mime_type=record.mime_type or "application/octet-stream",
            filename=record.original_filename or record.file_ref.rsplit("/", 1)[-1],
        )

    # ------------------------------------------------------------------
    # Student actions
    # ------------------------------------------------------------------

    def upload(
        self,
        session: ClearanceSession,
        matric: str,
        doc_type: DocumentType,
        filename: Optional[str],
        mime_type: Optional[str],
        data: bytes,
    ) -> ClearanceRecord:
        """Submit a file for an electronic document.

        Legal when the record is pending or rejected. Re-uploading after a
        rejection replaces the file reference; the previous blob is left for
        the reconciliation sweep.

        Raises:
            ForbiddenError: If the session may not upload for this matric
            ValidationError: If the file is empty, too large, or not JPG/PNG/PDF
            IllegalTransitionError: If the record is not pending or rejected,
                or doc_type is id_card
            StorageError: If the blob or the status write fails
        """
        action = ClearanceAction.UPLOAD
        self._authorize(session, matric, doc_type, action)

        try:
            safe_name = validate_upload(
                filename, mime_type, len(data), self.settings.MAX_UPLOAD_SIZE_BYTES
            )
        except ValidationError as e:
            upload_rejections_total.labels(reason=e.code).inc()
            logger.info(
                f"Upload rejected: matric={matric}, doc_type={doc_type.value}, "
                f"code={e.code}, size={len(data)}",
                extra={"matric": matric, "doc_type": doc_type.value, "action": action.value},
            )
            raise

        record = self._load(matric, doc_type)
        from_status = record.status
        new_status = self._resolve(record, action)
        base_mime = mime_type.split(";")[0].strip().lower()

        stored = self.blob_store.save(
            data,
            BlobMetadata(
                matric=matric,
                doc_type=doc_type.value,
                filename=safe_name,
                mime_type=base_mime,
            ),
        )

        try:
            self.records.set_status(
                matric,
                doc_type,
                new_status,
                file_ref=stored.storage_key,
                original_filename=safe_name,
                mime_type=base_mime,
            )
            self.db.commit()
        except (StorageError, SQLAlchemyError) as e:
            self.db.rollback()
            orphaned_blobs_total.labels(event="upload_failed").inc()
            clearance_transitions_total.labels(
                action=action.value, doc_type=doc_type.value, outcome="error"
            ).inc()
            logger.warning(
                f"Status write failed after blob save, blob orphaned: matric={matric}, "
                f"doc_type={doc_type.value}, storage_key={stored.storage_key}",
                extra={
                    "matric": matric,
                    "doc_type": doc_type.value,
                    "storage_key": stored.storage_key,
                },
            )
            raise StorageError(f"Failed to record upload of {doc_type.value} for {matric}") from e

        upload_size_bytes.observe(stored.size_bytes)
        return self._applied(matric, doc_type, action, from_status, new_status, session)

    def delete_document(self, session: ClearanceSession, matric: str, doc_type: DocumentType) -> ClearanceRecord:
        """Withdraw an uploaded or rejected file, returning the record to pending.

        The blob itself is not deleted here.

        Raises:
            IllegalTransitionError: If the record is pending or verified
        """
        action = ClearanceAction.DELETE
        self._authorize(session, matric, doc_type, action)

        record = self._load(matric, doc_type)
        from_status = record.status
        new_status = self._resolve(record, action)

        self.records.clear_file(matric, doc_type)
        self._commit(matric, doc_type, action)
        return self._applied(matric, doc_type, action, from_status, new_status, session)

    def notify_id_card(self, session: ClearanceSession, matric: str) -> ClearanceRecord:
        """Tell the administrator the ID card has been handed in physically.

        Repeated notifications are a no-op.
        """
        action = ClearanceAction.NOTIFY_ADMIN
        doc_type = DocumentType.ID_CARD
        self._authorize(session, matric, doc_type, action)

        record = self._load(matric, doc_type)
        from_status = record.status
        new_status = self._resolve(record, action)

        if new_status.value != from_status:
            self.records.set_status(matric, doc_type, new_status)
            self.records.set_notified(matric, doc_type)
            self._commit(matric, doc_type, action)
        return self._applied(matric, doc_type, action, from_status, new_status, session)

    # ------------------------------------------------------------------
    # Administrator actions
    # ------------------------------------------------------------------

    def _admin_transition(
        self,
        session: ClearanceSession,
        matric: str,
        doc_type: DocumentType,
        action: ClearanceAction,
    ) -> ClearanceRecord:
        self._authorize(session, matric, doc_type, action)

        record = self._load(matric, doc_type)
        from_status = record.status
        new_status = self._resolve(record, action)

        if new_status.value != from_status:
            if action is ClearanceAction.ADMIN_RESET:
                self.records.clear_file(matric, doc_type)
            else:
                self.records.set_status(matric, doc_type, new_status)
                if new_status is DocumentStatus.SUBMITTED_PHYSICALLY:
                    self.records.set_notified(matric, doc_type)
            self._commit(matric, doc_type, action)
        return self._applied(matric, doc_type, action, from_status, new_status, session)

    def admin_verify(self, session: ClearanceSession, matric: str, doc_type: DocumentType) -> ClearanceRecord:
        """Approve an uploaded document, or an ID card that has been handed in."""
        return self._admin_transition(session, matric, doc_type, ClearanceAction.ADMIN_VERIFY)

    def admin_reject(self, session: ClearanceSession, matric: str, doc_type: DocumentType) -> ClearanceRecord:
        """Reject an uploaded document. The file stays viewable."""
        return self._admin_transition(session, matric, doc_type, ClearanceAction.ADMIN_REJECT)

    def admin_reset(self, session: ClearanceSession, matric: str, doc_type: DocumentType) -> ClearanceRecord:
        """Force a record back to pending, clearing its file and notification."""
        return self._admin_transition(session, matric, doc_type, ClearanceAction.ADMIN_RESET)

    def admin_mark_submitted(self, session: ClearanceSession, matric: str, doc_type: DocumentType) -> ClearanceRecord:
        """Record a physical ID card hand-in on the student's behalf."""
        return self._admin_transition(session, matric, doc_type, ClearanceAction.ADMIN_MARK_SUBMITTED)

    def admin_update_status(
        self,
        session: ClearanceSession,
        matric: str,
        doc_type: DocumentType,
        new_status: DocumentStatus,
    ) -> ClearanceRecord:
        """Move a record to new_status through the matching admin action.

        verified -> admin_verify, rejected -> admin_reject,
        pending -> admin_reset, submitted_physically -> admin_mark_submitted.

        Raises:
            ForbiddenError: If the session is not an administrator
            IllegalTransitionError: If new_status is uploaded, or the action
                is illegal from the current status
        """
        require_admin(session)

        if new_status is DocumentStatus.UPLOADED:
            record = self._load(matric, doc_type)
            raise IllegalTransitionError(
                current_status=record.status,
                action=f"set status to {new_status.value}",
                doc_type=doc_type.value,
            )

        dispatch = {
            DocumentStatus.VERIFIED: self.admin_verify,
            DocumentStatus.REJECTED: self.admin_reject,
            DocumentStatus.PENDING: self.admin_reset,
            DocumentStatus.SUBMITTED_PHYSICALLY: self.admin_mark_submitted,
        }
        return dispatch[new_status](session, matric, doc_type)
