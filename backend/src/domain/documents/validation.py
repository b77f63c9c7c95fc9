"""File validation utilities for clearance document uploads

Validation runs before anything is written to the blob store or database.
"""

import os
import re
from typing import Optional, Tuple

from domain.errors import ValidationError


# Accepted MIME types mapped to the extensions they may carry
SUPPORTED_MIME_TYPES = {
    'image/jpeg': {'.jpg', '.jpeg'},
    'image/png': {'.png'},
    'application/pdf': {'.pdf'},
}

SUPPORTED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.pdf'}

# 10 MiB
MAX_FILE_SIZE = 10 * 1024 * 1024


def is_supported_mime_type(mime_type: Optional[str]) -> bool:
    """Check if MIME type is accepted for clearance uploads

    Example:
        >>> is_supported_mime_type('application/pdf')
        True
        >>> is_supported_mime_type('application/msword')
        False
    """
    if not mime_type:
        return False
    return mime_type.split(';')[0].strip().lower() in SUPPORTED_MIME_TYPES


def is_supported_extension(filename: str) -> bool:
    """Check if the filename extension is jpg, jpeg, png or pdf"""
    return os.path.splitext(filename)[1].lower() in SUPPORTED_EXTENSIONS


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Args:
        size_bytes: File size in bytes
        max_size: Maximum allowed size (defaults to MAX_FILE_SIZE)

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024)
        (True, None)
        >>> validate_file_size(0)
        (False, 'File is empty (0 bytes)')
    """
    if max_size is None:
        max_size = MAX_FILE_SIZE

    if size_bytes == 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"

    return True, None


def validate_filename(filename: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate filename

    Validation rules:
    - Not empty
    - Max 255 characters
    - No directory separators and no bare "." or ".." component
      (dots inside a name such as scan..v2.pdf are fine)
    - No null bytes or control characters

    Example:
        >>> validate_filename('receipt.pdf')
        (True, None)
        >>> validate_filename('')
        (False, 'Filename cannot be empty')
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > 255:
        return False, f"Filename exceeds 255 characters (got {len(filename)})"

    if '/' in filename or '\\' in filename or filename.strip() in ('.', '..'):
        return False, "Filename contains path traversal or directory separators"

    if '\x00' in filename:
        return False, "Filename contains null bytes"

    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage

    Example:
        >>> sanitize_filename('../../receipt.pdf')
        'receipt.pdf'
        >>> sanitize_filename('my receipt (copy).pdf')
        'my_receipt_copy_.pdf'
    """
    filename = os.path.basename(filename)
    filename = re.sub(r'[^\w\s.-]', '_', filename)
    filename = re.sub(r'[\s_]+', '_', filename)

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:255 - len(ext)] + ext

    return filename


def validate_upload(
    filename: Optional[str],
    mime_type: Optional[str],
    size_bytes: int,
    max_size: Optional[int] = None,
) -> str:
    """Run every upload check and return the sanitized filename.

    Both the MIME type and the extension must be acceptable, and they must
    agree with each other (a PNG named receipt.pdf is rejected).

    Raises:
        ValidationError: With code INVALID_FILENAME, UNSUPPORTED_FILE_TYPE,
            EMPTY_FILE or FILE_TOO_LARGE
    """
    if max_size is None:
        max_size = MAX_FILE_SIZE

    is_valid, error_msg = validate_filename(filename)
    if not is_valid:
        raise ValidationError(error_msg, code="INVALID_FILENAME")

    ext = os.path.splitext(filename)[1].lower()
    if not is_supported_mime_type(mime_type) or not is_supported_extension(filename):
        raise ValidationError(
            f"Invalid file type ({mime_type or 'unknown'}, {ext or 'no extension'}). "
            f"Only JPG, PNG, and PDF are allowed.",
            code="UNSUPPORTED_FILE_TYPE",
        )

    base_mime = mime_type.split(';')[0].strip().lower()
    if ext not in SUPPORTED_MIME_TYPES[base_mime]:
        raise ValidationError(
            f"File extension {ext} does not match content type {base_mime}",
            code="UNSUPPORTED_FILE_TYPE",
        )

    is_valid, error_msg = validate_file_size(size_bytes, max_size)
    if not is_valid:
        code = "EMPTY_FILE" if size_bytes == 0 else "FILE_TOO_LARGE"
        raise ValidationError(error_msg, code=code, max_size_bytes=max_size)

    return sanitize_filename(filename)
