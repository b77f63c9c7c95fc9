"""FastAPI dependencies for authentication and authorization.

This module provides dependency injection functions for:
- Extracting and validating JWT tokens from requests
- Building the ClearanceSession passed into clearance operations
- Restricting endpoints to administrators

Usage:
    @router.get("/clearance/{matric:path}")
    def get_clearance(matric: str, session: CurrentSession):
        ...

    @router.get("/admin/students")
    def roster(session: AdminSession):
        ...
"""

from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database import get_db
from infrastructure.repositories.student_repository import StudentRepository
from .gate import ClearanceSession
from .jwt import decode_token
from .roles import UserRole


security = HTTPBearer(auto_error=False)


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> ClearanceSession:
    """Validate the bearer token and return the caller's session.

    The role is taken from the database rather than the token, so a role
    change takes effect without waiting for tokens to expire.

    Raises:
        HTTPException 401: If token is missing, invalid, expired, or the
            account no longer exists
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    student = StudentRepository(db).find(payload["sub"])
    if student is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        role = UserRole(student.role)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Invalid account role: {student.role}",
        )

    return ClearanceSession(matric=student.matric, role=role, email=student.email)


def get_admin_session(
    session: ClearanceSession = Depends(get_current_session)
) -> ClearanceSession:
    """Convenience dependency for administrator-only endpoints.

    Raises:
        HTTPException 403: If the caller is not an administrator
    """
    if not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return session


# Type aliases for dependency injection
CurrentSession = Annotated[ClearanceSession, Depends(get_current_session)]
AdminSession = Annotated[ClearanceSession, Depends(get_admin_session)]
