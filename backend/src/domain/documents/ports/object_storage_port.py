"""Blob Store Port - Domain interface for document file storage.

This port defines the contract for storing and retrieving submitted clearance
files. Adapters implement it for the local filesystem or S3-compatible
object storage.

Blob writes and clearance_data writes are separate resources with no
two-phase commit. A blob whose status write failed stays behind until the
reconciliation sweep removes it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List


@dataclass
class StoredFile:
    """Metadata for a file stored in the blob store.

    Attributes:
        storage_key: Unique key (format: {safe_matric}/{doc_type}/{sha256}{ext})
        sha256: SHA256 hash of file content (hex format)
        size_bytes: File size in bytes
        mime_type: MIME type of the file (e.g., 'application/pdf')
    """
    storage_key: str
    sha256: str
    size_bytes: int
    mime_type: str


@dataclass
class BlobInfo:
    """Listing entry used by the reconciliation sweep."""
    storage_key: str
    size_bytes: int
    last_modified: datetime


@dataclass
class BlobMetadata:
    """What the caller knows about a file before it is stored."""
    matric: str
    doc_type: str
    filename: str
    mime_type: str
    extra: Dict[str, str] = field(default_factory=dict)


def safe_matric(matric: str) -> str:
    """Matric ids contain '/', which must not create nested key segments.

    Example:
        >>> safe_matric('eng/2020/001')
        'eng_2020_001'
    """
    return matric.replace("/", "_").replace("\\", "_")


def build_storage_key(metadata: BlobMetadata, sha256: str) -> str:
    """Generate storage key in format: {safe_matric}/{doc_type}/{sha256}{ext}

    Identical content uploaded again for the same record maps to the same key.
    """
    ext = Path(metadata.filename).suffix.lower()
    return f"{safe_matric(metadata.matric)}/{metadata.doc_type}/{sha256}{ext}"


class BlobStorePort(ABC):
    """Port interface for document blob storage.

    Implementations must raise domain.errors.StorageError for backend
    failures and domain.errors.NotFoundError when a key does not exist.
    """

    @abstractmethod
    def save(self, data: bytes, metadata: BlobMetadata) -> StoredFile:
        """Store file content and return its reference.

        Raises:
            StorageError: If the write fails
            ValueError: If data is empty
        """

    @abstractmethod
    def read(self, storage_key: str) -> bytes:
        """Return the content stored under storage_key.

        Raises:
            NotFoundError: If the key does not exist
            StorageError: If the read fails
        """

    @abstractmethod
    def delete(self, storage_key: str) -> bool:
        """Delete a stored file.

        Returns:
            bool: True if deleted, False if it did not exist
        """

    @abstractmethod
    def exists(self, storage_key: str) -> bool:
        """Check whether a key exists."""

    @abstractmethod
    def list_files(self, prefix: str = "") -> List[BlobInfo]:
        """List stored files, optionally restricted to a key prefix."""
