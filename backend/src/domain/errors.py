"""Domain exceptions for the clearance portal.

Every failure surfaced to callers is one of these types. Each carries a
stable ``code`` that the HTTP layer puts in the error body.
"""

from typing import Optional


class ClearanceError(Exception):
    """Base class for all clearance domain errors."""
    code = "CLEARANCE_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NotFoundError(ClearanceError):
    """Unknown student, record, or stored file."""
    code = "NOT_FOUND"


class AuthError(ClearanceError):
    """Bad credentials or missing/invalid session."""
    code = "AUTH_FAILED"


class ForbiddenError(AuthError):
    """Authenticated, but the session's capability does not cover the action."""
    code = "FORBIDDEN"


class ValidationError(ClearanceError):
    """Rejected upload (oversized, empty, wrong type, bad filename)."""
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, max_size_bytes: Optional[int] = None):
        super().__init__(message, code)
        self.max_size_bytes = max_size_bytes


class IllegalTransitionError(ClearanceError):
    """State machine precondition violated. Nothing was mutated."""
    code = "ILLEGAL_TRANSITION"

    def __init__(self, current_status: str, action: str, doc_type: Optional[str] = None):
        self.current_status = current_status
        self.action = action
        self.doc_type = doc_type
        target = f" on {doc_type}" if doc_type else ""
        super().__init__(
            f"Cannot {action}{target} while status is '{current_status}'"
        )


class StorageError(ClearanceError):
    """Underlying database or blob store failure. Safe to retry."""
    code = "STORAGE_ERROR"
