"""CertificateReady SQLAlchemy model

Presence of a row means the student's certificate can be collected. The flag
is asserted by the records office, not derived from clearance statuses.
"""

from sqlalchemy import Column, Text, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class CertificateReady(Base):
    __tablename__ = "certificates_ready"

    matric = Column(Text, ForeignKey("students.matric", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    student = relationship("Student", back_populates="certificate_ready")
