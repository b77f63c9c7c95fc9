"""ClearanceRecord SQLAlchemy model

One row per (student, document type). Rows are created together on first
access and never deleted; a student "delete" resets the row to pending.
"""

from sqlalchemy import (
    Column, Integer, Text, Boolean, ForeignKey, DateTime, CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false

from domain.documents.document_types import DocumentStatus, DocumentType
from .base import Base


def _in_clause(values) -> str:
    return ", ".join(f"'{v.value}'" for v in values)


class ClearanceRecord(Base):
    """Status of one clearance document for one student.

    file_ref is the blob storage key of the submitted file. It is null
    whenever status is pending and is retained on rejection so administrators
    can still view what was rejected.
    """
    __tablename__ = "clearance_data"
    __table_args__ = (
        UniqueConstraint("matric", "doc_type", name="uq_clearance_data_matric_doc_type"),
        CheckConstraint(f"doc_type IN ({_in_clause(DocumentType)})", name="ck_clearance_data_doc_type"),
        CheckConstraint(f"status IN ({_in_clause(DocumentStatus)})", name="ck_clearance_data_status"),
        CheckConstraint("status <> 'pending' OR file_ref IS NULL", name="ck_clearance_data_pending_no_file"),
        Index("ix_clearance_data_doc_type_status", "doc_type", "status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    matric = Column(Text, ForeignKey("students.matric", ondelete="RESTRICT"), nullable=False)
    doc_type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=DocumentStatus.PENDING.value)
    file_ref = Column(Text, nullable=True)
    original_filename = Column(Text, nullable=True)
    mime_type = Column(Text, nullable=True)
    notified_admin = Column(Boolean, nullable=False, server_default=false(), default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    student = relationship("Student", back_populates="clearance_records")

    @property
    def document_type(self) -> DocumentType:
        return DocumentType(self.doc_type)

    @property
    def document_status(self) -> DocumentStatus:
        return DocumentStatus(self.status)

    def to_dict(self):
        """Convert record to its wire representation"""
        return {
            "matric": self.matric,
            "doc_type": self.doc_type,
            "status": self.status,
            "filename": self.file_ref,
            "original_filename": self.original_filename,
            "mime_type": self.mime_type,
            "notified_admin": bool(self.notified_admin),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
