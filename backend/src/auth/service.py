"""Login: turn a matric and password into a session."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from domain.errors import AuthError
from infrastructure.repositories.student_repository import StudentRepository
from .gate import ClearanceSession
from .jwt import create_access_token, get_jwt_expiry_minutes
from .password import hash_password, needs_rehash, verify_password
from .roles import UserRole

logger = logging.getLogger(__name__)

# Same message for unknown matric and wrong password to prevent enumeration
_INVALID_CREDENTIALS = "Invalid matric number or password"


@dataclass
class LoginResult:
    session: ClearanceSession
    access_token: str
    expires_in: int


def authenticate(db: Session, matric: str, password: str) -> LoginResult:
    """Verify credentials and issue a session token.

    Re-hashes the stored credential when Argon2 parameters have been raised
    since it was created.

    Raises:
        AuthError: If the matric is unknown or the password does not match
    """
    student = StudentRepository(db).find(matric.strip())

    if student is None or not verify_password(password, student.password_hash):
        logger.info(f"Login failed: matric={matric}")
        raise AuthError(_INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")

    if needs_rehash(student.password_hash):
        student.password_hash = hash_password(password)
        db.commit()
        logger.info(f"Upgraded password hash: matric={student.matric}")

    session = ClearanceSession(
        matric=student.matric,
        role=UserRole(student.role),
        email=student.email,
    )
    token = create_access_token(
        matric=session.matric,
        role=session.role.value,
        email=session.email,
    )

    logger.info(f"Login succeeded: matric={session.matric}, role={session.role.value}")
    return LoginResult(
        session=session,
        access_token=token,
        expires_in=get_jwt_expiry_minutes() * 60,
    )
