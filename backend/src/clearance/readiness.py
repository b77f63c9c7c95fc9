"""Readiness aggregator: read-side views composed from clearance records.

Certificate readiness is asserted externally (a row in certificates_ready);
nothing here derives it from document statuses.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from sqlalchemy.orm import Session

from auth.gate import ClearanceSession, authorize_read, require_admin
from auth.roles import UserRole
from domain.documents.document_types import (
    DocumentStatus,
    DocumentType,
    GENERAL_DOCUMENT_TYPES,
    ID_CARD_TYPES,
    RECEIPT_TYPES,
)
from domain.errors import NotFoundError
from infrastructure.repositories.clearance_repository import ClearanceRecordStore
from infrastructure.repositories.student_repository import StudentRepository
from models.clearance_record import ClearanceRecord


@dataclass
class StudentView:
    """What a student sees on their dashboard."""
    matric: str
    email: Optional[str]
    certificate_ready: bool
    payment_confirmed: bool
    documents: List[ClearanceRecord] = field(default_factory=list)


@dataclass
class RosterEntry:
    """One student with all their records, for the admin overview."""
    matric: str
    email: Optional[str]
    payment_confirmed: bool
    certificate_ready: bool
    documents: List[ClearanceRecord] = field(default_factory=list)


@dataclass
class QueueItem:
    """One record awaiting (or past) administrator review."""
    matric: str
    email: Optional[str]
    payment_confirmed: bool
    record: ClearanceRecord


class ReadinessAggregator:
    """Derives student and administrator views from the record store."""

    def __init__(self, db: Session):
        self.db = db
        self.records = ClearanceRecordStore(db)
        self.students = StudentRepository(db)

    def get_readiness(self, session: ClearanceSession, matric: str) -> bool:
        """True iff the student's certificate has been marked ready for collection."""
        authorize_read(session, matric)
        return self.students.is_certificate_ready(matric)

    def student_view(self, session: ClearanceSession, matric: str) -> StudentView:
        """Compose readiness, payment and documents for one student.

        Raises:
            ForbiddenError: If a student asks for another student's view
            NotFoundError: If the matric is not a provisioned student
        """
        authorize_read(session, matric)
        student = self.students.get(matric)
        if student.role != UserRole.STUDENT.value:
            raise NotFoundError(f"Student {matric} not found")

        return StudentView(
            matric=student.matric,
            email=student.email,
            certificate_ready=self.students.is_certificate_ready(matric),
            payment_confirmed=bool(student.paid),
            documents=self.records.ensure_records(matric),
        )

    def admin_roster(self, session: ClearanceSession) -> List[RosterEntry]:
        """Every student account with its records.

        Pure read: students who never opened the portal have no records yet
        and are listed with an empty document list.
        """
        require_admin(session)

        students = self.students.list_by_role(UserRole.STUDENT.value)
        by_student = self.records.get_records_by_student([s.matric for s in students])
        ready = self.students.ready_matrics()

        return [
            RosterEntry(
                matric=student.matric,
                email=student.email,
                payment_confirmed=bool(student.paid),
                certificate_ready=student.matric in ready,
                documents=by_student.get(student.matric, []),
            )
            for student in students
        ]

    def _queue(
        self,
        session: ClearanceSession,
        doc_types: FrozenSet[DocumentType],
        status: Optional[DocumentStatus],
    ) -> List[QueueItem]:
        wanted = {doc_type.value for doc_type in doc_types}
        items = []
        for entry in self.admin_roster(session):
            for record in entry.documents:
                if record.doc_type not in wanted:
                    continue
                if status is not None and record.status != status.value:
                    continue
                items.append(QueueItem(
                    matric=entry.matric,
                    email=entry.email,
                    payment_confirmed=entry.payment_confirmed,
                    record=record,
                ))
        return items

    def receipts_queue(self, session: ClearanceSession, status: Optional[DocumentStatus] = None) -> List[QueueItem]:
        """Certificate payment receipts."""
        return self._queue(session, RECEIPT_TYPES, status)

    def id_card_queue(self, session: ClearanceSession, status: Optional[DocumentStatus] = None) -> List[QueueItem]:
        """Physical ID card hand-ins."""
        return self._queue(session, ID_CARD_TYPES, status)

    def documents_queue(self, session: ClearanceSession, status: Optional[DocumentStatus] = None) -> List[QueueItem]:
        """Statement of result, school fees receipt and clearance form."""
        return self._queue(session, GENERAL_DOCUMENT_TYPES, status)

