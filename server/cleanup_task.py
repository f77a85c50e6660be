"""Background task that reconciles the blob store with file records."""

import asyncio
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from blobstore.blob_storage import LocalBlobStore
from common.logging_config import get_logger
from server.config import SWEEP_GRACE, SWEEP_INTERVAL
from server.locks import RecordLockRegistry, get_lock_registry
from server.repositories.file_repository import FileRepository
from server.service_locator import get_blob_store

logger = get_logger(__name__)


@dataclass
class SweepReport:
    started_at: datetime
    removed_blobs: List[str] = field(default_factory=list)
    kept_recent_blobs: List[str] = field(default_factory=list)
    failed_blobs: List[str] = field(default_factory=list)
    missing_blobs: List[str] = field(default_factory=list)


class OrphanedBlobSweeper:
    """
    Removes blobs that no file record points at.

    Uploads write the blob before the record and deletes remove the record
    before the blob, so an interrupted operation leaves at most an orphaned
    blob. Blobs younger than the grace period are skipped since they may
    belong to an upload that has not written its record yet.

    Records whose blob is missing are only reported.
    """

    def __init__(
        self,
        interval_seconds: int = SWEEP_INTERVAL,
        grace_seconds: int = SWEEP_GRACE,
        blob_store: Optional[LocalBlobStore] = None,
        locks: Optional[RecordLockRegistry] = None,
    ):
        self.interval_seconds = interval_seconds
        self.grace_seconds = grace_seconds
        self.blob_store = blob_store if blob_store is not None else get_blob_store()
        self.locks = locks if locks is not None else get_lock_registry()
        self.file_repo = FileRepository()
        self.last_report: Optional[SweepReport] = None
        self._running = False
        self._task = None

    async def start(self) -> None:
        """Start the background sweep task."""
        if self._running:
            logger.warning("Sweep task already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started orphaned blob sweep task (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the background sweep task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("Stopped orphaned blob sweep task")

    async def _run(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await asyncio.to_thread(self.sweep)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in sweep task: {e}", exc_info=True)

    def sweep(self) -> SweepReport:
        """Execute one sweep cycle."""
        report = SweepReport(started_at=datetime.now(timezone.utc))

        blob_ids = self.blob_store.list_blobs()
        record_ids = set(self.file_repo.list_ids())

        for blob_id in blob_ids:
            if blob_id in record_ids:
                continue

            age = self.blob_store.blob_age_seconds(blob_id)
            if age is None:
                continue
            if age < self.grace_seconds:
                report.kept_recent_blobs.append(blob_id)
                continue

            self._remove_orphan(blob_id, report)

        blob_set = set(blob_ids)
        for file_id in sorted(record_ids - blob_set):
            logger.error(f"File record {file_id} has no blob")
            report.missing_blobs.append(file_id)

        logger.info(
            f"Sweep complete: {len(report.removed_blobs)} removed, "
            f"{len(report.kept_recent_blobs)} recent, {len(report.failed_blobs)} failed, "
            f"{len(report.missing_blobs)} records missing content"
        )
        self.last_report = report
        return report

    def _remove_orphan(self, blob_id: str, report: SweepReport) -> None:
        # Re-check under the record lock so an upload finishing right now keeps its blob
        with self.locks.hold(blob_id):
            try:
                if self.file_repo.exists(blob_id):
                    return
            except sqlite3.Error as e:
                logger.warning(f"Could not check record for blob {blob_id}: {e}")
                report.failed_blobs.append(blob_id)
                return

            try:
                if self.blob_store.delete(blob_id):
                    logger.info(f"Removed orphaned blob {blob_id}")
                    report.removed_blobs.append(blob_id)
            except OSError as e:
                logger.warning(f"Error removing orphaned blob {blob_id}: {e}")
                report.failed_blobs.append(blob_id)
