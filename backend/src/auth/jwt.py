"""JWT token generation and validation

Bearer tokens carry the session: who the caller is and which role they hold.

Claims:
- sub: Matriculation id of the account (e.g. "eng/2020/001")
- role: "STUDENT" | "ADMIN"
- email: Contact email, or null
- iat / exp: Issued-at and expiry as Unix timestamps

Security Properties:
- Algorithm: HS256
- Secret: JWT_SECRET environment variable
- No refresh tokens (re-login after expiry)
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt


def _get_jwt_secret() -> str:
    """Get JWT_SECRET from environment.

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    secret = os.getenv('JWT_SECRET')
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set")
    return secret


def get_jwt_expiry_minutes() -> int:
    """Get JWT_EXPIRY_MINUTES from environment (default: 60)."""
    expiry = os.getenv('JWT_EXPIRY_MINUTES', '60')
    try:
        return int(expiry)
    except ValueError:
        return 60


def create_access_token(matric: str, role: str, email: Optional[str] = None) -> str:
    """Create a signed access token for an authenticated account.

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    now = datetime.now(timezone.utc)
    expiration = now + timedelta(minutes=get_jwt_expiry_minutes())

    payload = {
        'sub': matric,
        'role': role,
        'email': email,
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp()),
    }

    return jwt.encode(payload, _get_jwt_secret(), algorithm='HS256')


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
        ValueError: If JWT_SECRET is not set
    """
    return jwt.decode(
        token,
        _get_jwt_secret(),
        algorithms=['HS256'],
        options={"require": ["sub", "role", "exp"]},
    )
