"""Student SQLAlchemy model"""

from sqlalchemy import Column, Text, Boolean, CheckConstraint, DateTime
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func, false
import re

from .base import Base


class Student(Base):
    """Account for a student or administrator of the clearance portal.

    The matriculation id is the primary key and login username. Accounts are
    provisioned outside the portal; role is fixed at provisioning time.
    Passwords are hashed using Argon2id.
    """
    __tablename__ = "students"

    matric = Column(Text, primary_key=True)
    email = Column(Text, nullable=True)
    role = Column(Text, nullable=False, server_default="STUDENT")
    password_hash = Column(Text, nullable=False)
    paid = Column(Boolean, nullable=False, server_default=false(), default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    clearance_records = relationship(
        "ClearanceRecord",
        back_populates="student",
        order_by="ClearanceRecord.id",
    )
    certificate_ready = relationship("CertificateReady", back_populates="student", uselist=False)

    __table_args__ = (
        CheckConstraint(
            "role IN ('STUDENT', 'ADMIN')",
            name='ck_students_role'
        ),
    )

    @validates('email')
    def validate_email(self, key, value):
        """Basic email format validation"""
        if value is None:
            return value
        if not re.match(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$', value):
            raise ValueError("Invalid email format")
        return value.lower()

    def to_dict(self):
        """Convert student to dictionary representation (excludes password_hash)"""
        return {
            "matric": self.matric,
            "email": self.email,
            "role": self.role,
            "paid": bool(self.paid),
        }
