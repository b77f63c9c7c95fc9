"""Blob reconciliation sweep.

Uploads write the blob before the status row, and deletes, resets and
re-uploads drop a record's reference without removing its blob. This sweep
finds blobs no record references any more and deletes them.

Blobs younger than the grace period are never collected, so an upload whose
status write has not committed yet is left alone. The store is listed before
references are read for the same reason.

Sweeps are idempotent and can be safely re-run.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from domain.documents.ports.object_storage_port import BlobInfo, BlobStorePort
from domain.errors import StorageError
from infrastructure.repositories.clearance_repository import ClearanceRecordStore
from observability.metrics import orphaned_blobs_total

logger = logging.getLogger(__name__)

DEFAULT_GRACE_MINUTES = 60


@dataclass
class ReconciliationReport:
    """Outcome of one scan or sweep.

    Attributes:
        scanned: Blobs listed in the store
        referenced: Blobs still referenced by a clearance record
        orphaned: Unreferenced blobs older than the grace period
        deleted: Orphans actually removed (0 on a dry run)
        skipped_recent: Unreferenced blobs still inside the grace period
        failed: Orphans whose deletion raised a storage error
        orphan_keys: Storage keys of the orphans
    """
    scanned: int = 0
    referenced: int = 0
    orphaned: int = 0
    deleted: int = 0
    skipped_recent: int = 0
    failed: int = 0
    dry_run: bool = False
    orphan_keys: List[str] = field(default_factory=list)


class BlobReconciler:
    """Finds and removes blobs that no clearance record references."""

    def __init__(
        self,
        db: Session,
        blob_store: BlobStorePort,
        grace_minutes: int = DEFAULT_GRACE_MINUTES,
    ):
        self.db = db
        self.blob_store = blob_store
        self.grace = timedelta(minutes=grace_minutes)
        self.records = ClearanceRecordStore(db)

    def _scan(self, now: Optional[datetime] = None) -> Tuple[ReconciliationReport, List[BlobInfo]]:
        now = now or datetime.now(timezone.utc)
        cutoff = now - self.grace

        blobs = self.blob_store.list_files()
        referenced = self.records.referenced_file_refs()

        report = ReconciliationReport(scanned=len(blobs))
        orphans = []
        for blob in blobs:
            if blob.storage_key in referenced:
                report.referenced += 1
            elif blob.last_modified > cutoff:
                report.skipped_recent += 1
            else:
                orphans.append(blob)

        report.orphaned = len(orphans)
        report.orphan_keys = [blob.storage_key for blob in orphans]
        return report, orphans

    def find_orphans(self, now: Optional[datetime] = None) -> List[BlobInfo]:
        """Unreferenced blobs older than the grace period."""
        _, orphans = self._scan(now)
        return orphans

    def sweep(self, dry_run: bool = False, now: Optional[datetime] = None) -> ReconciliationReport:
        """Delete orphaned blobs.

        Args:
            dry_run: Report what would be deleted without deleting
            now: Reference time for the grace period (defaults to current UTC)

        Returns:
            ReconciliationReport: Counts and keys of what was found and removed
        """
        report, orphans = self._scan(now)
        report.dry_run = dry_run

        if dry_run:
            logger.info(
                f"Blob sweep dry run: scanned={report.scanned}, orphaned={report.orphaned}, "
                f"skipped_recent={report.skipped_recent}"
            )
            return report

        for blob in orphans:
            try:
                if self.blob_store.delete(blob.storage_key):
                    report.deleted += 1
                    logger.info(
                        f"Deleted orphaned blob: {blob.storage_key}",
                        extra={"storage_key": blob.storage_key},
                    )
            except StorageError as e:
                report.failed += 1
                logger.error(
                    f"Failed to delete orphaned blob {blob.storage_key}: {e.message}",
                    extra={"storage_key": blob.storage_key},
                )

        if report.deleted:
            orphaned_blobs_total.labels(event="swept").inc(report.deleted)

        logger.info(
            f"Blob sweep completed: scanned={report.scanned}, referenced={report.referenced}, "
            f"deleted={report.deleted}, failed={report.failed}, "
            f"skipped_recent={report.skipped_recent}"
        )
        return report
