"""S3 Storage Adapter - BlobStorePort backed by an S3-compatible bucket.

Used in production against AWS S3 or a MinIO deployment. Objects are keyed
{safe_matric}/{doc_type}/{sha256}{ext}, so a student re-submitting the same
scan writes nothing new.
"""

import hashlib
import logging
from typing import List, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from domain.documents.ports.object_storage_port import (
    BlobInfo,
    BlobMetadata,
    BlobStorePort,
    StoredFile,
    build_storage_key,
)
from domain.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = ("404", "NoSuchKey", "NotFound")


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "Unknown")


class S3StorageAdapter(BlobStorePort):
    """Clearance document blobs in one S3 bucket.

    Example:
        config = load_storage_config(get_settings())
        storage = S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )
        stored = storage.save(data, BlobMetadata(...))
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
    ):
        """
        Args:
            endpoint_url: MinIO URL, or None for AWS S3
            bucket_name: Bucket holding all clearance documents

        Raises:
            StorageError: If the client cannot be created
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
        except (NoCredentialsError, BotoCoreError) as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

        self.bucket_name = bucket_name
        self.region = region
        logger.info(
            f"Initialized S3 storage adapter: bucket={bucket_name}, "
            f"endpoint={endpoint_url or 'AWS S3'}"
        )

    def _fail(self, operation: str, storage_key: str, e: Exception) -> StorageError:
        detail = _error_code(e) if isinstance(e, ClientError) else str(e)
        logger.error(f"S3 {operation} failed: storage_key={storage_key}, error={detail}")
        return StorageError(f"Failed to {operation} {storage_key}: {detail}")

    def _refresh(self, storage_key: str, mime_type: str, object_metadata: dict) -> bool:
        """Copy an existing object onto itself so its LastModified restarts.

        The orphan sweep ages blobs by LastModified; a re-submitted document
        must not look older than the upload that is about to reference it.
        Returns False if the object does not exist.
        """
        try:
            self.s3_client.copy_object(
                Bucket=self.bucket_name,
                Key=storage_key,
                CopySource={"Bucket": self.bucket_name, "Key": storage_key},
                ContentType=mime_type,
                Metadata=object_metadata,
                MetadataDirective="REPLACE",
            )
            return True
        except ClientError as e:
            if _error_code(e) in _MISSING_KEY_CODES:
                return False
            raise self._fail("refresh", storage_key, e)
        except BotoCoreError as e:
            raise self._fail("refresh", storage_key, e)

    def save(self, data: bytes, metadata: BlobMetadata) -> StoredFile:
        """Upload a submitted document unless identical content is already stored.

        Raises:
            ValueError: If data is empty
            StorageError: If the bucket rejects the write
        """
        if not data:
            raise ValueError("Cannot store empty file")

        sha256_hex = hashlib.sha256(data).hexdigest()
        storage_key = build_storage_key(metadata, sha256_hex)
        stored = StoredFile(
            storage_key=storage_key,
            sha256=sha256_hex,
            size_bytes=len(data),
            mime_type=metadata.mime_type,
        )

        # S3 user metadata must be ASCII
        object_metadata = {
            "sha256": sha256_hex,
            "matric": quote(metadata.matric),
            "doc_type": metadata.doc_type,
            "original_filename": quote(metadata.filename),
        }
        object_metadata.update({k: quote(v) for k, v in metadata.extra.items()})

        if self._refresh(storage_key, metadata.mime_type, object_metadata):
            logger.info(f"Document already stored (dedup): storage_key={storage_key}")
            return stored

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=data,
                ContentType=metadata.mime_type,
                Metadata=object_metadata,
            )
        except (ClientError, BotoCoreError) as e:
            raise self._fail("upload", storage_key, e)

        logger.info(
            f"Stored {metadata.doc_type} for {metadata.matric}: "
            f"storage_key={storage_key}, size={stored.size_bytes}"
        )
        return stored

    def read(self, storage_key: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=storage_key)
            return response["Body"].read()
        except ClientError as e:
            if _error_code(e) in _MISSING_KEY_CODES:
                logger.warning(f"Document blob missing: storage_key={storage_key}")
                raise NotFoundError(f"File not found: {storage_key}")
            raise self._fail("read", storage_key, e)
        except BotoCoreError as e:
            raise self._fail("read", storage_key, e)

    def delete(self, storage_key: str) -> bool:
        """Returns False if there was nothing to delete."""
        if not self.exists(storage_key):
            return False

        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=storage_key)
        except (ClientError, BotoCoreError) as e:
            raise self._fail("delete", storage_key, e)

        logger.info(f"Deleted blob: storage_key={storage_key}")
        return True

    def exists(self, storage_key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=storage_key)
            return True
        except ClientError as e:
            if _error_code(e) in _MISSING_KEY_CODES:
                return False
            raise self._fail("check", storage_key, e)
        except BotoCoreError as e:
            raise self._fail("check", storage_key, e)

    def list_files(self, prefix: str = "") -> List[BlobInfo]:
        """Every object under prefix, across all result pages."""
        files = []
        try:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                files.extend(
                    BlobInfo(
                        storage_key=obj["Key"],
                        size_bytes=obj["Size"],
                        last_modified=obj["LastModified"],
                    )
                    for obj in page.get("Contents", [])
                )
        except (ClientError, BotoCoreError) as e:
            raise self._fail("list", prefix or "<bucket>", e)
        return files
