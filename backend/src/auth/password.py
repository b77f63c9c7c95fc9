"""Password hashing and verification using Argon2id

Credential hashes are created at provisioning time and verified at login.
The password is combined with a server-side PASSWORD_PEPPER before hashing.

OWASP Parameters:
- Memory cost: 65536 KB (64 MB)
- Time cost: 3 iterations
- Parallelism: 4 threads
"""

import os
import re

from argon2 import PasswordHasher, Type
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError


_hasher = PasswordHasher(
    memory_cost=65536,  # 64 MB
    time_cost=3,
    parallelism=4,
    hash_len=32,
    salt_len=16,
    type=Type.ID
)


def _get_pepper() -> str:
    """Get PASSWORD_PEPPER from environment.

    Raises:
        ValueError: If PASSWORD_PEPPER is not set
    """
    pepper = os.getenv('PASSWORD_PEPPER')
    if not pepper:
        raise ValueError("PASSWORD_PEPPER environment variable is not set")
    return pepper


def hash_password(password: str) -> str:
    """Hash a password using Argon2id with global pepper.

    Returns:
        str: Argon2id hash string (format: $argon2id$v=19$m=65536,t=3,p=4$...$...)

    Raises:
        ValueError: If PASSWORD_PEPPER is not set or password is empty
    """
    if not password:
        raise ValueError("Password cannot be empty")

    return _hasher.hash(password + _get_pepper())


def verify_password(password: str, hash: str) -> bool:
    """Verify a password against an Argon2id hash.

    Returns:
        bool: True if password matches hash, False otherwise (including
            malformed hashes)

    Raises:
        ValueError: If PASSWORD_PEPPER is not set
    """
    if not password or not hash:
        return False

    try:
        _hasher.verify(hash, password + _get_pepper())
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(hash: str) -> bool:
    """True if the hash was made with weaker parameters than the current ones."""
    try:
        return _hasher.check_needs_rehash(hash)
    except InvalidHashError:
        return True


def validate_password_strength(password: str) -> tuple[bool, str]:
    """Validate a password chosen at provisioning time.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Example:
        >>> validate_password_strength("short1")
        (False, 'Password must be at least 8 characters long')
        >>> validate_password_strength("clearance2024")
        (True, '')
    """
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"

    if not re.search(r'[A-Za-z]', password):
        return False, "Password must contain at least one letter"

    if not re.search(r'\d', password):
        return False, "Password must contain at least one digit"

    return True, ""
