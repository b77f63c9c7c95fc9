"""Access gate: the session object and the checks run before every operation.

A ClearanceSession is built once per request from the bearer token and
passed explicitly into each clearance operation.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from domain.documents.document_status import ClearanceAction
from domain.errors import ForbiddenError
from .roles import UserRole, can_perform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClearanceSession:
    """Authenticated caller.

    Attributes:
        matric: Matriculation id of the account
        role: Account role
        email: Contact email, if any
    """
    matric: str
    role: UserRole
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    def owns(self, matric: str) -> bool:
        return self.matric == matric


def authorize_read(session: ClearanceSession, matric: str) -> None:
    """Students may read only their own data; administrators may read anyone's.

    Raises:
        ForbiddenError: If a student targets another matric
    """
    if session.is_admin or session.owns(matric):
        return
    logger.warning(
        f"Read denied: session={session.matric}, target={matric}"
    )
    raise ForbiddenError("Students may only view their own clearance records")


def authorize_action(session: ClearanceSession, matric: str, action: ClearanceAction) -> None:
    """Check role capability and, for students, record ownership.

    Raises:
        ForbiddenError: If the role lacks the capability, or a student
            targets another matric
    """
    if not can_perform(session.role, action):
        logger.warning(
            f"Action denied by role: session={session.matric}, role={session.role.value}, "
            f"action={action.value}"
        )
        raise ForbiddenError(
            f"Role {session.role.value} may not perform {action.value}"
        )

    if session.role is UserRole.STUDENT and not session.owns(matric):
        logger.warning(
            f"Action denied by ownership: session={session.matric}, target={matric}, "
            f"action={action.value}"
        )
        raise ForbiddenError("Students may only act on their own clearance records")


def require_admin(session: ClearanceSession) -> None:
    """Raises ForbiddenError unless the session is an administrator."""
    if not session.is_admin:
        raise ForbiddenError("Administrator access required")
