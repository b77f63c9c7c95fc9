from .object_storage_port import (
    BlobInfo,
    BlobMetadata,
    BlobStorePort,
    StoredFile,
    build_storage_key,
    safe_matric,
)

__all__ = [
    "BlobInfo",
    "BlobMetadata",
    "BlobStorePort",
    "StoredFile",
    "build_storage_key",
    "safe_matric",
]
