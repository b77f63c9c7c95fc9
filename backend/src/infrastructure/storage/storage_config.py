"""Storage configuration for the document blob store.

Selects the local filesystem or S3-compatible object storage from settings
and builds the matching adapter.
"""

from dataclasses import dataclass
from typing import Optional

from config import Settings, get_settings
from domain.documents.ports.object_storage_port import BlobStorePort


@dataclass
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: S3 endpoint URL (e.g., 'http://localhost:9000' for MinIO,
                      None for AWS S3 which uses default regional endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: S3 bucket name for clearance documents
        region: AWS region (default: 'us-east-1')
        use_ssl: Whether to use HTTPS
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"
    use_ssl: bool = True


def load_storage_config(settings: Optional[Settings] = None) -> StorageConfig:
    """Build S3 configuration from settings.

    Example (MinIO in development):
        STORAGE_BACKEND=s3
        MINIO_ENDPOINT=localhost:9000
        MINIO_ROOT_USER=minioadmin
        MINIO_ROOT_PASSWORD=minioadmin
        MINIO_BUCKET=clearance-documents

    Raises:
        ValueError: If credentials are missing
    """
    settings = settings or get_settings()

    endpoint_url = None
    if settings.MINIO_ENDPOINT:
        protocol = "https" if settings.MINIO_USE_SSL else "http"
        endpoint_url = f"{protocol}://{settings.MINIO_ENDPOINT}"

    if not settings.MINIO_ROOT_USER or not settings.MINIO_ROOT_PASSWORD:
        raise ValueError(
            "Missing required storage credentials. "
            "Set MINIO_ROOT_USER and MINIO_ROOT_PASSWORD environment variables."
        )

    config = StorageConfig(
        endpoint_url=endpoint_url,
        access_key=settings.MINIO_ROOT_USER,
        secret_key=settings.MINIO_ROOT_PASSWORD,
        bucket_name=settings.MINIO_BUCKET,
        region=settings.AWS_REGION,
        use_ssl=settings.MINIO_USE_SSL if settings.MINIO_ENDPOINT else True,
    )
    validate_storage_config(config)
    return config


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Raises:
        ValueError: If configuration is invalid
    """
    if not config.bucket_name:
        raise ValueError("Storage bucket_name is required")

    if config.endpoint_url:
        if not config.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid endpoint_url: {config.endpoint_url}. "
                "Must start with http:// or https://"
            )
    elif not config.region:
        raise ValueError("AWS region is required when using S3 (MINIO_ENDPOINT not set)")


def build_blob_store(settings: Optional[Settings] = None) -> BlobStorePort:
    """Create the blob store adapter selected by STORAGE_BACKEND.

    Raises:
        ValueError: If STORAGE_BACKEND is unknown or S3 config is incomplete
    """
    settings = settings or get_settings()
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "local":
        from .local_storage_adapter import LocalStorageAdapter
        return LocalStorageAdapter(settings.LOCAL_STORAGE_DIR)

    if backend == "s3":
        from .s3_storage_adapter import S3StorageAdapter
        config = load_storage_config(settings)
        return S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
