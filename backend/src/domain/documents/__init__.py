"""Documents domain module - clearance document kinds, lifecycle, upload validation"""

from .document_types import (
    DocumentType,
    DocumentStatus,
    DOCUMENT_LABELS,
    FILE_BEARING_STATUSES,
    RECEIPT_TYPES,
    ID_CARD_TYPES,
    GENERAL_DOCUMENT_TYPES,
)
from .document_status import (
    ClearanceAction,
    ELECTRONIC_TRANSITIONS,
    ID_CARD_TRANSITIONS,
    can_transition,
    next_status,
    get_allowed_actions,
    transitions_for,
)
from .validation import (
    is_supported_mime_type,
    is_supported_extension,
    validate_file_size,
    validate_filename,
    validate_upload,
    sanitize_filename,
    SUPPORTED_MIME_TYPES,
    SUPPORTED_EXTENSIONS,
    MAX_FILE_SIZE,
)

__all__ = [
    "DocumentType",
    "DocumentStatus",
    "DOCUMENT_LABELS",
    "FILE_BEARING_STATUSES",
    "RECEIPT_TYPES",
    "ID_CARD_TYPES",
    "GENERAL_DOCUMENT_TYPES",
    "ClearanceAction",
    "ELECTRONIC_TRANSITIONS",
    "ID_CARD_TRANSITIONS",
    "can_transition",
    "next_status",
    "get_allowed_actions",
    "transitions_for",
    "is_supported_mime_type",
    "is_supported_extension",
    "validate_file_size",
    "validate_filename",
    "validate_upload",
    "sanitize_filename",
    "SUPPORTED_MIME_TYPES",
    "SUPPORTED_EXTENSIONS",
    "MAX_FILE_SIZE",
]
