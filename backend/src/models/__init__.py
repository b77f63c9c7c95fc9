"""SQLAlchemy Models for the clearance portal"""

from .base import Base
from .student import Student
from .clearance_record import ClearanceRecord
from .certificate_ready import CertificateReady

__all__ = [
    "Base",
    "Student",
    "ClearanceRecord",
    "CertificateReady",
]
