"""Unit tests for S3 Storage Adapter using moto

Tests cover the BlobStorePort contract against a mocked S3 bucket: save,
read, delete, exists, list, content-addressed keys and deduplication.
"""

import hashlib

import boto3
import pytest
from moto import mock_aws

from domain.documents.ports.object_storage_port import BlobMetadata, StoredFile
from domain.errors import NotFoundError, StorageError
from infrastructure.storage.s3_storage_adapter import S3StorageAdapter


# Test constants
TEST_BUCKET = "test-clearance-bucket"
TEST_REGION = "us-east-1"
TEST_ACCESS_KEY = "test-access-key"
TEST_SECRET_KEY = "test-secret-key"


def receipt_metadata(filename="receipt.pdf", mime_type="application/pdf") -> BlobMetadata:
    return BlobMetadata(
        matric="eng/2020/001",
        doc_type="certificate_payment_receipt",
        filename=filename,
        mime_type=mime_type,
    )


@pytest.fixture
def storage_adapter():
    """Create S3StorageAdapter instance with mock S3"""
    with mock_aws():
        s3_client = boto3.client(
            "s3",
            region_name=TEST_REGION,
            aws_access_key_id=TEST_ACCESS_KEY,
            aws_secret_access_key=TEST_SECRET_KEY,
        )
        s3_client.create_bucket(Bucket=TEST_BUCKET)

        adapter = S3StorageAdapter(
            endpoint_url=None,  # AWS S3 (moto mocks this)
            access_key=TEST_ACCESS_KEY,
            secret_key=TEST_SECRET_KEY,
            bucket_name=TEST_BUCKET,
            region=TEST_REGION,
        )

        yield adapter


class TestSave:

    def test_save_returns_content_addressed_key(self, storage_adapter):
        content = b"%PDF-1.4 payment receipt"

        stored = storage_adapter.save(content, receipt_metadata())

        sha256 = hashlib.sha256(content).hexdigest()
        assert isinstance(stored, StoredFile)
        assert stored.storage_key == f"eng_2020_001/certificate_payment_receipt/{sha256}.pdf"
        assert stored.sha256 == sha256
        assert stored.size_bytes == len(content)
        assert stored.mime_type == "application/pdf"

    def test_save_sets_object_metadata(self, storage_adapter):
        stored = storage_adapter.save(b"png bytes", receipt_metadata("scan.PNG", "image/png"))

        head = storage_adapter.s3_client.head_object(Bucket=TEST_BUCKET, Key=stored.storage_key)
        assert stored.storage_key.endswith(".png")
        assert head["ContentType"] == "image/png"
        assert head["Metadata"]["matric"] == "eng/2020/001"
        assert head["Metadata"]["original_filename"] == "scan.PNG"

    def test_identical_content_deduplicated(self, storage_adapter):
        first = storage_adapter.save(b"same content", receipt_metadata())
        second = storage_adapter.save(b"same content", receipt_metadata())

        assert first.storage_key == second.storage_key
        assert len(storage_adapter.list_files()) == 1

    def test_identical_content_refreshes_last_modified(self, storage_adapter, monkeypatch):
        stored = storage_adapter.save(b"same content", receipt_metadata())
        copies = []
        copy_object = storage_adapter.s3_client.copy_object

        def recording_copy(**kwargs):
            copies.append(kwargs)
            return copy_object(**kwargs)

        monkeypatch.setattr(storage_adapter.s3_client, "copy_object", recording_copy)

        storage_adapter.save(b"same content", receipt_metadata())

        assert len(copies) == 1
        assert copies[0]["Key"] == stored.storage_key
        assert copies[0]["CopySource"] == {"Bucket": TEST_BUCKET, "Key": stored.storage_key}
        assert copies[0]["MetadataDirective"] == "REPLACE"
        head = storage_adapter.s3_client.head_object(Bucket=TEST_BUCKET, Key=stored.storage_key)
        assert head["Metadata"]["matric"] == "eng/2020/001"

    def test_empty_content_raises_error(self, storage_adapter):
        with pytest.raises(ValueError, match="Cannot store empty file"):
            storage_adapter.save(b"", receipt_metadata())


class TestReadDeleteExists:

    def test_read_round_trip(self, storage_adapter):
        stored = storage_adapter.save(b"receipt body", receipt_metadata())

        assert storage_adapter.read(stored.storage_key) == b"receipt body"

    def test_read_missing_raises_not_found(self, storage_adapter):
        with pytest.raises(NotFoundError):
            storage_adapter.read("eng_2020_001/id_card/missing.pdf")

    def test_exists(self, storage_adapter):
        stored = storage_adapter.save(b"receipt body", receipt_metadata())

        assert storage_adapter.exists(stored.storage_key) is True
        assert storage_adapter.exists("nope/nothing.pdf") is False

    def test_delete(self, storage_adapter):
        stored = storage_adapter.save(b"receipt body", receipt_metadata())

        assert storage_adapter.delete(stored.storage_key) is True
        assert storage_adapter.exists(stored.storage_key) is False
        assert storage_adapter.delete(stored.storage_key) is False


class TestListFiles:

    def test_list_with_prefix(self, storage_adapter):
        storage_adapter.save(b"one", receipt_metadata())
        storage_adapter.save(b"two", BlobMetadata(
            matric="eng/2020/002",
            doc_type="clearance_form",
            filename="form.pdf",
            mime_type="application/pdf",
        ))

        everything = storage_adapter.list_files()
        mine = storage_adapter.list_files(prefix="eng_2020_001/")

        assert len(everything) == 2
        assert len(mine) == 1
        assert mine[0].storage_key.startswith("eng_2020_001/certificate_payment_receipt/")
        assert mine[0].size_bytes == 3
        assert mine[0].last_modified.tzinfo is not None


class TestErrors:

    def test_missing_bucket_raises_storage_error(self):
        with mock_aws():
            adapter = S3StorageAdapter(
                endpoint_url=None,
                access_key=TEST_ACCESS_KEY,
                secret_key=TEST_SECRET_KEY,
                bucket_name="bucket-that-does-not-exist",
                region=TEST_REGION,
            )

            with pytest.raises(StorageError):
                adapter.list_files()
