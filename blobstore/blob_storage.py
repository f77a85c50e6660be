"""Stores file contents as blobs on local disk, one file per blob id."""

import os
import re
import tempfile
import time
from pathlib import Path
from typing import Iterator, Optional

from common.constants import BLOB_SUFFIX, DEFAULT_BLOB_STORAGE_PATH, STREAM_PIECE_SIZE
from common.logging_config import get_logger

logger = get_logger(__name__)

BLOB_STORAGE_PATH = os.environ.get("SHAREDRIVE_BLOB_PATH", DEFAULT_BLOB_STORAGE_PATH)

_VALID_BLOB_ID = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9._-]*$")


class BlobStoreError(Exception):
    """
    Base exception for blob storage errors.
    """
    pass


class BlobNotFoundError(BlobStoreError):
    """
    Raised when a blob id has no stored content.
    """
    pass


class BlobExistsError(BlobStoreError):
    """
    Raised when put() targets an id that already holds content.
    """
    pass


class LocalBlobStore:
    """
    Path-addressed blob store backed by a directory.

    Blobs are written to a temporary file in the same directory, fsynced and
    then hard-linked into place, so a blob id is either absent or holds the
    complete content. Linking fails if the target exists, which makes put()
    an exclusive create.
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else Path(BLOB_STORAGE_PATH)

    def ensure_directory(self) -> None:
        """Ensure blob directory exists."""
        self.root.mkdir(parents=True, exist_ok=True)

    def get_blob_path(self, blob_id: str) -> Path:
        """
        Get file path for a blob.

        Raises:
            ValueError: If blob_id is not a safe single path component
        """
        if not _VALID_BLOB_ID.match(blob_id):
            raise ValueError(f"Invalid blob id: {blob_id!r}")
        return self.root / f"{blob_id}{BLOB_SUFFIX}"

    def put(self, data: bytes, name: str) -> str:
        """
        Store data under the id `name`.

        Args:
            data: Complete blob content
            name: Blob id to store under

        Returns:
            The blob id

        Raises:
            BlobExistsError: If content is already stored under this id
            OSError: If the write fails
        """
        self.ensure_directory()
        target = self.get_blob_path(name)

        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=BLOB_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            try:
                os.link(tmp_name, target)
            except FileExistsError:
                raise BlobExistsError(f"Blob {name} already exists")
        finally:
            os.unlink(tmp_name)

        self._fsync_directory()
        logger.debug(f"Stored blob {name} ({len(data)} bytes)")
        return name

    def get(self, blob_id: str) -> bytes:
        """
        Read entire blob.

        Raises:
            BlobNotFoundError: If blob does not exist
        """
        try:
            return self.get_blob_path(blob_id).read_bytes()
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob {blob_id} not found")

    def stream(self, blob_id: str, piece_size: int = STREAM_PIECE_SIZE) -> Iterator[bytes]:
        """
        Stream blob data in pieces.

        The blob is opened before the first piece is requested, so a missing
        blob raises BlobNotFoundError here rather than mid-response.
        """
        try:
            f = open(self.get_blob_path(blob_id), "rb")
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob {blob_id} not found")

        def _pieces() -> Iterator[bytes]:
            with f:
                while True:
                    piece = f.read(piece_size)
                    if not piece:
                        break
                    yield piece

        return _pieces()

    def delete(self, blob_id: str) -> bool:
        """
        Delete blob from disk.

        Returns:
            True if the blob was deleted, False if it didn't exist
        """
        try:
            self.get_blob_path(blob_id).unlink()
        except FileNotFoundError:
            return False
        self._fsync_directory()
        logger.debug(f"Deleted blob {blob_id}")
        return True

    def exists(self, blob_id: str) -> bool:
        return self.get_blob_path(blob_id).exists()

    def list_blobs(self) -> list[str]:
        """
        List all blob ids in the storage directory.

        Temporary files from in-progress writes and names that are not valid
        blob ids are not included.
        """
        if not self.root.exists():
            return []
        names = (path.name[: -len(BLOB_SUFFIX)] for path in self.root.glob(f"*{BLOB_SUFFIX}"))
        return sorted(name for name in names if _VALID_BLOB_ID.match(name))

    def blob_age_seconds(self, blob_id: str) -> Optional[float]:
        """
        Seconds since the blob was written, or None if it doesn't exist.
        """
        try:
            mtime = self.get_blob_path(blob_id).stat().st_mtime
        except FileNotFoundError:
            return None
        return max(0.0, time.time() - mtime)

    def _fsync_directory(self) -> None:
        if not hasattr(os, "O_DIRECTORY"):
            return
        fd = os.open(self.root, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
