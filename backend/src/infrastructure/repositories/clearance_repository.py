"""Clearance record store for database operations"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from domain.documents.document_types import DocumentStatus, DocumentType
from domain.errors import NotFoundError, StorageError
from models.clearance_record import ClearanceRecord

logger = logging.getLogger(__name__)

_TYPE_ORDER = {doc_type.value: index for index, doc_type in enumerate(DocumentType)}


def _sorted(records: Iterable[ClearanceRecord]) -> List[ClearanceRecord]:
    return sorted(records, key=lambda r: _TYPE_ORDER.get(r.doc_type, len(_TYPE_ORDER)))


class ClearanceRecordStore:
    """Repository for clearance_data rows.

    Writes here are unconditional: legality of a status change is decided by
    the state machine before any of these methods is called. Each write is a
    single UPDATE keyed by (matric, doc_type), so concurrent writers on the
    same record resolve last-writer-wins and writers on different records
    never touch the same row.

    Apart from ensure_records, methods flush but do not commit; the caller
    owns the transaction.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def ensure_records(self, matric: str) -> List[ClearanceRecord]:
        """Create one pending record per document type if missing.

        All missing rows are inserted and committed in one transaction. If a
        concurrent first login commits the same rows first, the unique
        constraint on (matric, doc_type) rejects ours; the batch is rolled
        back and the winner's rows are returned.

        Raises:
            StorageError: If the insert fails for any other reason
        """
        existing = self.get_records(matric)
        present = {record.doc_type for record in existing}
        missing = [doc_type for doc_type in DocumentType if doc_type.value not in present]
        if not missing:
            return existing

        try:
            self.db.add_all([
                ClearanceRecord(
                    matric=matric,
                    doc_type=doc_type.value,
                    status=DocumentStatus.PENDING.value,
                    file_ref=None,
                    notified_admin=False,
                )
                for doc_type in missing
            ])
            self.db.commit()
            logger.info(
                f"Created clearance records: matric={matric}, "
                f"doc_types={[d.value for d in missing]}"
            )
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Clearance records created concurrently, re-reading: matric={matric}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create clearance records: matric={matric}, error={e}")
            raise StorageError(f"Failed to create clearance records for {matric}")

        return self.get_records(matric)

    def get_records(self, matric: str) -> List[ClearanceRecord]:
        """Return all records of a student in document type order."""
        records = self.db.execute(
            select(ClearanceRecord).where(ClearanceRecord.matric == matric)
        ).scalars().all()
        return _sorted(records)

    def get_record(self, matric: str, doc_type: DocumentType) -> ClearanceRecord:
        """Return one record.

        Raises:
            NotFoundError: If the record has not been materialized
        """
        record = self.db.execute(
            select(ClearanceRecord).where(
                ClearanceRecord.matric == matric,
                ClearanceRecord.doc_type == doc_type.value,
            )
        ).scalar_one_or_none()
        if record is None:
            raise NotFoundError(f"No {doc_type.value} record for student {matric}")
        return record

    def _update(self, matric: str, doc_type: DocumentType, **values) -> None:
        try:
            result = self.db.execute(
                update(ClearanceRecord)
                .where(
                    ClearanceRecord.matric == matric,
                    ClearanceRecord.doc_type == doc_type.value,
                )
                .values(**values)
                .execution_options(synchronize_session="fetch")
            )
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error(
                f"Clearance record update failed: matric={matric}, "
                f"doc_type={doc_type.value}, error={e}"
            )
            raise StorageError(f"Failed to update {doc_type.value} record for {matric}")

        if result.rowcount == 0:
            raise NotFoundError(f"No {doc_type.value} record for student {matric}")

    def set_status(
        self,
        matric: str,
        doc_type: DocumentType,
        new_status: DocumentStatus,
        file_ref: Optional[str] = None,
        original_filename: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> None:
        """Write a new status.

        A file_ref of None leaves the stored reference untouched (rejection
        keeps the file viewable); use clear_file to drop it.
        """
        values = {"status": new_status.value}
        if file_ref is not None:
            values["file_ref"] = file_ref
            values["original_filename"] = original_filename
            values["mime_type"] = mime_type
        self._update(matric, doc_type, **values)

    def clear_file(self, matric: str, doc_type: DocumentType) -> None:
        """Reset a record to pending with no file and no admin notification."""
        self._update(
            matric,
            doc_type,
            status=DocumentStatus.PENDING.value,
            file_ref=None,
            original_filename=None,
            mime_type=None,
            notified_admin=False,
        )

    def set_notified(self, matric: str, doc_type: DocumentType) -> None:
        """Set the admin-notified flag. Idempotent."""
        self._update(matric, doc_type, notified_admin=True)

    def get_records_by_student(self, matrics: Optional[Iterable[str]] = None) -> Dict[str, List[ClearanceRecord]]:
        """Group records by matric, optionally restricted to some students."""
        query = select(ClearanceRecord)
        if matrics is not None:
            query = query.where(ClearanceRecord.matric.in_(list(matrics)))

        grouped: Dict[str, List[ClearanceRecord]] = {}
        for record in self.db.execute(query).scalars().all():
            grouped.setdefault(record.matric, []).append(record)
        return {matric: _sorted(records) for matric, records in grouped.items()}

    def referenced_file_refs(self) -> Set[str]:
        """Every storage key still referenced by some record."""
        rows = self.db.execute(
            select(ClearanceRecord.file_ref).where(ClearanceRecord.file_ref.is_not(None))
        ).scalars().all()
        return set(rows)
