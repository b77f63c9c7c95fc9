"""Pydantic schemas for authentication endpoints"""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request schema for login.

    Attributes:
        matric: Matriculation id (login username)
        password: Plain text password, verified against the stored hash
    """
    matric: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """The authenticated caller."""
    matric: str
    role: str
    email: Optional[str] = None


class LoginResponse(BaseModel):
    """Response schema for successful login.

    Attributes:
        access_token: JWT access token
        token_type: Token type (always "bearer")
        expires_in: Token expiry in seconds
        session: Who is logged in and with which role
    """
    access_token: str
    token_type: str = "bearer"
    expires_in: int = 3600
    session: SessionResponse
