"""Account roles and the capabilities each role grants.

Role is an explicit column on the students table, set at provisioning time.

Capability Matrix:
┌──────────────────────────────┬─────────────────────┬───────────────┐
│ Action                       │ STUDENT             │ ADMIN         │
├──────────────────────────────┼─────────────────────┼───────────────┤
│ View clearance / readiness   │ own matric only     │ any matric    │
│ View submitted file          │ own matric only     │ any matric    │
│ Upload / delete document     │ own matric only     │               │
│ Notify admin (ID card)       │ own matric only     │               │
│ Verify / reject / reset      │                     │ any matric    │
│ Mark ID card submitted       │                     │ any matric    │
│ Roster, queues, blob sweep   │                     │ ✓             │
└──────────────────────────────┴─────────────────────┴───────────────┘
"""

from enum import Enum
from typing import Dict, FrozenSet

from domain.documents.document_status import ClearanceAction


class UserRole(str, Enum):
    """Account roles.

    Values are stored as TEXT in the database and must match exactly.
    """
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


STUDENT_ACTIONS: FrozenSet[ClearanceAction] = frozenset({
    ClearanceAction.UPLOAD,
    ClearanceAction.DELETE,
    ClearanceAction.NOTIFY_ADMIN,
})

ADMIN_ACTIONS: FrozenSet[ClearanceAction] = frozenset({
    ClearanceAction.ADMIN_VERIFY,
    ClearanceAction.ADMIN_REJECT,
    ClearanceAction.ADMIN_RESET,
    ClearanceAction.ADMIN_MARK_SUBMITTED,
})

ROLE_CAPABILITIES: Dict[UserRole, FrozenSet[ClearanceAction]] = {
    UserRole.STUDENT: STUDENT_ACTIONS,
    UserRole.ADMIN: ADMIN_ACTIONS,
}


def can_perform(role: UserRole, action: ClearanceAction) -> bool:
    """Check if a role may invoke a state machine action at all.

    Ownership (a student acting on their own matric) is checked separately.

    Examples:
        >>> can_perform(UserRole.STUDENT, ClearanceAction.UPLOAD)
        True
        >>> can_perform(UserRole.STUDENT, ClearanceAction.ADMIN_VERIFY)
        False
    """
    return action in ROLE_CAPABILITIES.get(role, frozenset())
