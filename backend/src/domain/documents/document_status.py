"""Clearance state machine for document records.

The transition table is data: for each document kind and action it maps the
current status to the resulting status. A pair missing from the table is an
illegal transition. A mapping onto the same status is an idempotent no-op
(e.g. notifying the admin twice).

Electronic documents:
    PENDING --upload--> UPLOADED --admin_verify--> VERIFIED
                        UPLOADED --admin_reject--> REJECTED --upload--> UPLOADED
    UPLOADED | REJECTED --delete--> PENDING

ID card (submitted physically):
    PENDING --notify_admin--> SUBMITTED_PHYSICALLY --admin_verify--> VERIFIED

Any non-pending record --admin_reset--> PENDING
"""

from enum import Enum
from typing import Dict, List

from domain.errors import IllegalTransitionError
from .document_types import DocumentStatus, DocumentType


class ClearanceAction(str, Enum):
    """Actions that move a clearance record between statuses."""
    UPLOAD = "upload"
    DELETE = "delete"
    NOTIFY_ADMIN = "notify_admin"
    ADMIN_VERIFY = "admin_verify"
    ADMIN_REJECT = "admin_reject"
    ADMIN_RESET = "admin_reset"
    ADMIN_MARK_SUBMITTED = "admin_mark_submitted"


TransitionTable = Dict[ClearanceAction, Dict[DocumentStatus, DocumentStatus]]

ELECTRONIC_TRANSITIONS: TransitionTable = {
    ClearanceAction.UPLOAD: {
        DocumentStatus.PENDING: DocumentStatus.UPLOADED,
        DocumentStatus.REJECTED: DocumentStatus.UPLOADED,  # Re-upload after rejection
    },
    ClearanceAction.DELETE: {
        DocumentStatus.UPLOADED: DocumentStatus.PENDING,
        DocumentStatus.REJECTED: DocumentStatus.PENDING,
    },
    ClearanceAction.ADMIN_VERIFY: {
        DocumentStatus.UPLOADED: DocumentStatus.VERIFIED,
    },
    ClearanceAction.ADMIN_REJECT: {
        DocumentStatus.UPLOADED: DocumentStatus.REJECTED,
    },
    ClearanceAction.ADMIN_RESET: {
        DocumentStatus.UPLOADED: DocumentStatus.PENDING,
        DocumentStatus.VERIFIED: DocumentStatus.PENDING,
        DocumentStatus.REJECTED: DocumentStatus.PENDING,
    },
}

ID_CARD_TRANSITIONS: TransitionTable = {
    ClearanceAction.NOTIFY_ADMIN: {
        DocumentStatus.PENDING: DocumentStatus.SUBMITTED_PHYSICALLY,
        DocumentStatus.SUBMITTED_PHYSICALLY: DocumentStatus.SUBMITTED_PHYSICALLY,
        DocumentStatus.VERIFIED: DocumentStatus.VERIFIED,
    },
    ClearanceAction.ADMIN_MARK_SUBMITTED: {
        DocumentStatus.PENDING: DocumentStatus.SUBMITTED_PHYSICALLY,
        DocumentStatus.SUBMITTED_PHYSICALLY: DocumentStatus.SUBMITTED_PHYSICALLY,
    },
    ClearanceAction.ADMIN_VERIFY: {
        DocumentStatus.SUBMITTED_PHYSICALLY: DocumentStatus.VERIFIED,
        DocumentStatus.VERIFIED: DocumentStatus.VERIFIED,
    },
    ClearanceAction.ADMIN_RESET: {
        DocumentStatus.SUBMITTED_PHYSICALLY: DocumentStatus.PENDING,
        DocumentStatus.VERIFIED: DocumentStatus.PENDING,
    },
}


def transitions_for(doc_type: DocumentType) -> TransitionTable:
    """Return the transition table governing a document type."""
    if doc_type is DocumentType.ID_CARD:
        return ID_CARD_TRANSITIONS
    return ELECTRONIC_TRANSITIONS


def can_transition(
    doc_type: DocumentType,
    current_status: DocumentStatus,
    action: ClearanceAction,
) -> bool:
    """Check if an action is legal for a record without raising.

    Example:
        >>> can_transition(DocumentType.CLEARANCE_FORM, DocumentStatus.PENDING, ClearanceAction.UPLOAD)
        True
        >>> can_transition(DocumentType.ID_CARD, DocumentStatus.PENDING, ClearanceAction.UPLOAD)
        False
    """
    return current_status in transitions_for(doc_type).get(action, {})


def next_status(
    doc_type: DocumentType,
    current_status: DocumentStatus,
    action: ClearanceAction,
) -> DocumentStatus:
    """Resolve the status an action leads to.

    Args:
        doc_type: Document type of the record
        current_status: Status the record is in now
        action: Attempted action

    Returns:
        DocumentStatus: Resulting status (equal to current_status for no-ops)

    Raises:
        IllegalTransitionError: If the table has no entry for the pair
    """
    allowed = transitions_for(doc_type).get(action, {})
    if current_status not in allowed:
        raise IllegalTransitionError(
            current_status=current_status.value,
            action=action.value,
            doc_type=doc_type.value,
        )
    return allowed[current_status]


def get_allowed_actions(doc_type: DocumentType, current_status: DocumentStatus) -> List[ClearanceAction]:
    """Get the actions that are legal from the current status.

    Example:
        >>> get_allowed_actions(DocumentType.ID_CARD, DocumentStatus.PENDING)
        [ClearanceAction.NOTIFY_ADMIN, ClearanceAction.ADMIN_MARK_SUBMITTED]
    """
    return [
        action
        for action, allowed in transitions_for(doc_type).items()
        if current_status in allowed
    ]
