"""Local filesystem implementation of BlobStorePort.

Stores files under a root directory using the same content-addressed keys as
the S3 adapter. Used in development and tests.
"""

import hashlib
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from domain.documents.ports.object_storage_port import (
    BlobInfo,
    BlobMetadata,
    BlobStorePort,
    StoredFile,
    build_storage_key,
)
from domain.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)


class LocalStorageAdapter(BlobStorePort):
    """Blob store backed by a directory on local disk."""

    def __init__(self, root_dir: str):
        self.root = Path(root_dir).resolve()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create storage directory {self.root}: {e}")
        logger.info(f"Initialized local storage adapter: root={self.root}")

    def _path_for(self, storage_key: str) -> Path:
        path = (self.root / storage_key).resolve()
        if self.root not in path.parents:
            raise NotFoundError(f"File not found: {storage_key}")
        return path

    def save(self, data: bytes, metadata: BlobMetadata) -> StoredFile:
        if not data:
            raise ValueError("Cannot store empty file")

        sha256_hex = hashlib.sha256(data).hexdigest()
        storage_key = build_storage_key(metadata, sha256_hex)
        path = self._path_for(storage_key)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            try:
                # Identical content already stored: restart its age so the
                # orphan sweep treats it as a fresh upload
                os.utime(path)
                logger.info(f"File already exists (dedup): storage_key={storage_key}")
            except FileNotFoundError:
                # Write to a temp file and rename so readers never see a partial file
                fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".upload-")
                with os.fdopen(fd, "wb") as tmp:
                    tmp.write(data)
                os.replace(tmp_name, path)
                logger.info(
                    f"Stored file: storage_key={storage_key}, "
                    f"size={len(data)}, mime_type={metadata.mime_type}"
                )
        except OSError as e:
            logger.error(f"Local storage write failed: storage_key={storage_key}, error={e}")
            raise StorageError(f"Failed to store file: {e}")

        return StoredFile(
            storage_key=storage_key,
            sha256=sha256_hex,
            size_bytes=len(data),
            mime_type=metadata.mime_type,
        )

    def read(self, storage_key: str) -> bytes:
        path = self._path_for(storage_key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            logger.warning(f"File not found: storage_key={storage_key}")
            raise NotFoundError(f"File not found: {storage_key}")
        except OSError as e:
            raise StorageError(f"Failed to read file: {e}")

    def delete(self, storage_key: str) -> bool:
        path = self._path_for(storage_key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info(f"File not found for deletion: storage_key={storage_key}")
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete file: {e}")
        logger.info(f"Deleted file: storage_key={storage_key}")
        return True

    def exists(self, storage_key: str) -> bool:
        try:
            return self._path_for(storage_key).is_file()
        except NotFoundError:
            return False

    def list_files(self, prefix: str = "") -> List[BlobInfo]:
        files = []
        try:
            for path in self.root.rglob("*"):
                if not path.is_file() or path.name.startswith(".upload-"):
                    continue
                key = path.relative_to(self.root).as_posix()
                if not key.startswith(prefix):
                    continue
                stat = path.stat()
                files.append(BlobInfo(
                    storage_key=key,
                    size_bytes=stat.st_size,
                    last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                ))
        except OSError as e:
            raise StorageError(f"Failed to list files: {e}")
        return sorted(files, key=lambda f: f.storage_key)
