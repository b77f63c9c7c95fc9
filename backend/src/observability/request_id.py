"""Request ID management for request correlation.

The id lives in a context variable so it follows the request through the
threadpool that runs sync endpoints.
"""

import uuid
from contextvars import ContextVar, Token
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

_MAX_INCOMING_LENGTH = 128


def generate_request_id() -> str:
    """Generate a new unique request ID (UUID v4)."""
    return str(uuid.uuid4())


def accept_request_id(incoming: Optional[str]) -> str:
    """Use a client-supplied X-Request-ID if it is sane, else generate one."""
    if incoming and len(incoming) <= _MAX_INCOMING_LENGTH and incoming.isprintable():
        return incoming
    return generate_request_id()


def get_request_id() -> str:
    """Current request ID or "no-request-id" outside a request."""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: str) -> Token:
    """Set request ID in current context; returns a token for reset_request_id."""
    return request_id_var.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_var.reset(token)
