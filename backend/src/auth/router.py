"""Authentication endpoints for the clearance portal"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from .dependencies import CurrentSession
from .schemas import LoginRequest, LoginResponse, SessionResponse
from .service import authenticate


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Authenticate a student or administrator and return a bearer token.

    Raises:
        AuthError: Rendered as 401 for unknown matric or wrong password
    """
    result = authenticate(db, credentials.matric, credentials.password)
    return LoginResponse(
        access_token=result.access_token,
        token_type="bearer",
        expires_in=result.expires_in,
        session=SessionResponse(
            matric=result.session.matric,
            role=result.session.role.value,
            email=result.session.email,
        ),
    )


@router.get("/me", response_model=SessionResponse)
def get_me(session: CurrentSession):
    """Return the session behind the current bearer token."""
    return SessionResponse(
        matric=session.matric,
        role=session.role.value,
        email=session.email,
    )
