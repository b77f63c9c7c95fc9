"""Student repository for database operations"""

from typing import List, Optional, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from domain.errors import NotFoundError
from models.certificate_ready import CertificateReady
from models.student import Student


class StudentRepository:
    """Read access to provisioned accounts and the certificate-ready flag.

    Accounts are provisioned outside the portal; nothing here creates them.
    """

    def __init__(self, db: Session):
        self.db = db

    def find(self, matric: str) -> Optional[Student]:
        return self.db.get(Student, matric)

    def get(self, matric: str) -> Student:
        """Raises NotFoundError for an unknown matric."""
        student = self.find(matric)
        if student is None:
            raise NotFoundError(f"Student {matric} not found")
        return student

    def list_by_role(self, role: str) -> List[Student]:
        return list(
            self.db.execute(
                select(Student).where(Student.role == role).order_by(Student.matric)
            ).scalars().all()
        )

    def is_certificate_ready(self, matric: str) -> bool:
        return self.db.get(CertificateReady, matric) is not None

    def ready_matrics(self) -> Set[str]:
        return set(self.db.execute(select(CertificateReady.matric)).scalars().all())
