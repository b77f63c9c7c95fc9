"""Clearance document kinds and statuses.

Both enums are part of the wire contract: values are stored in the database
and returned to clients verbatim.
"""

from enum import Enum
from typing import FrozenSet


class DocumentType(str, Enum):
    """The fixed set of documents every student must clear."""
    STATEMENT_OF_RESULT = "statement_of_result"
    SCHOOL_FEES_RECEIPT = "school_fees_receipt"
    CLEARANCE_FORM = "clearance_form"
    CERTIFICATE_PAYMENT_RECEIPT = "certificate_payment_receipt"
    ID_CARD = "id_card"  # Handed in physically, never uploaded

    @property
    def is_electronic(self) -> bool:
        return self is not DocumentType.ID_CARD

    @property
    def label(self) -> str:
        return DOCUMENT_LABELS[self]


class DocumentStatus(str, Enum):
    """Clearance record status

    Electronic documents: PENDING -> UPLOADED -> VERIFIED | REJECTED,
    REJECTED -> UPLOADED on re-upload.
    ID card: PENDING -> SUBMITTED_PHYSICALLY -> VERIFIED.
    """
    PENDING = "pending"
    UPLOADED = "uploaded"
    VERIFIED = "verified"
    REJECTED = "rejected"
    SUBMITTED_PHYSICALLY = "submitted_physically"


DOCUMENT_LABELS = {
    DocumentType.STATEMENT_OF_RESULT: "Statement of Result",
    DocumentType.SCHOOL_FEES_RECEIPT: "School Fees Receipt (from 100L)",
    DocumentType.CLEARANCE_FORM: "Clearance Form",
    DocumentType.CERTIFICATE_PAYMENT_RECEIPT: "Certificate Payment Receipt",
    DocumentType.ID_CARD: "500L ID Card (Physical Submission)",
}

# Electronic records in these states always carry a stored file reference
FILE_BEARING_STATUSES: FrozenSet[DocumentStatus] = frozenset({
    DocumentStatus.UPLOADED,
    DocumentStatus.VERIFIED,
    DocumentStatus.REJECTED,
})

# Admin review queues
RECEIPT_TYPES: FrozenSet[DocumentType] = frozenset({DocumentType.CERTIFICATE_PAYMENT_RECEIPT})
ID_CARD_TYPES: FrozenSet[DocumentType] = frozenset({DocumentType.ID_CARD})
GENERAL_DOCUMENT_TYPES: FrozenSet[DocumentType] = frozenset({
    DocumentType.STATEMENT_OF_RESULT,
    DocumentType.SCHOOL_FEES_RECEIPT,
    DocumentType.CLEARANCE_FORM,
})
