"""File service: upload, list, download, transfer, share, revoke and delete."""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, Iterable, Iterator, List, Optional, Tuple

from blobstore.blob_storage import BlobExistsError, BlobNotFoundError, LocalBlobStore
from common.constants import MAX_FILE_ID_LENGTH
from common.logging_config import get_logger
from server.authorization import Action, is_allowed
from server.database import get_db_connection, write_transaction
from server.domain import FileRecord, derive_file_id, extension_of
from server.exceptions import (
    FileConflictError,
    FileNotFoundError,
    ForbiddenError,
    InvalidFileNameError,
    InvalidTargetError,
    StorageFailureError,
)
from server.locks import RecordLockRegistry, get_lock_registry
from server.repositories.file_repository import FileRepository
from server.repositories.user_repository import UserRepository
from server.service_locator import get_blob_store

logger = get_logger(__name__)


class FileService:
    """
    Coordinates the blob store and the metadata store.

    Every mutation of an existing record runs under that record's lock and
    inside one write transaction: the record is reloaded, authorized and
    written before the lock is released. Blob I/O stays outside the lock.

    Ordering keeps "metadata implies blob": uploads write the blob before
    the record, deletes remove the record before the blob. A crash between
    the two steps can only leave an orphaned blob, which the sweeper removes.
    """

    def __init__(
        self,
        blob_store: Optional[LocalBlobStore] = None,
        locks: Optional[RecordLockRegistry] = None,
    ):
        self.file_repo = FileRepository()
        self.user_repo = UserRepository()
        self.blob_store = blob_store if blob_store is not None else get_blob_store()
        self.locks = locks if locks is not None else get_lock_registry()

    def upload_file(self, data: bytes, suggested_name: str, principal_id: str) -> FileRecord:
        if not is_allowed(Action.UPLOAD, None, principal_id):
            raise ForbiddenError("Uploads require an authenticated user")

        file_id = derive_file_id(suggested_name)
        if not file_id:
            raise InvalidFileNameError(f"Cannot derive a file id from {suggested_name!r}")
        if len(file_id) > MAX_FILE_ID_LENGTH:
            raise InvalidFileNameError(
                f"File name is {len(file_id)} characters long, the limit is {MAX_FILE_ID_LENGTH}"
            )

        if self._record_exists(file_id):
            logger.warning(f"Upload rejected, file id in use [file_id={file_id}] [user_id={principal_id}]")
            raise FileConflictError(f"File {file_id} already exists")

        try:
            self.blob_store.put(data, file_id)
        except BlobExistsError:
            logger.warning(f"Upload rejected, blob already stored [file_id={file_id}]")
            raise FileConflictError(f"File {file_id} already exists")
        except OSError as e:
            logger.error(f"Blob write failed [file_id={file_id}]: {e}", exc_info=True)
            raise StorageFailureError(f"Could not store content for {file_id}") from e

        record = FileRecord(
            file_id=file_id,
            owner_id=principal_id,
            size=len(data),
            type=extension_of(suggested_name),
            name=suggested_name,
            created_at=datetime.now(timezone.utc),
        )

        try:
            with self.locks.hold(file_id), get_db_connection() as conn, write_transaction(conn):
                self.file_repo.insert(record, conn=conn)
        except sqlite3.IntegrityError as e:
            self._discard_blob(file_id)
            if self._record_exists(file_id):
                raise FileConflictError(f"File {file_id} already exists")
            logger.error(f"Metadata insert rejected [file_id={file_id}]: {e}")
            raise StorageFailureError(f"Could not record {file_id}") from e
        except sqlite3.Error as e:
            logger.error(f"Metadata write failed [file_id={file_id}]: {e}", exc_info=True)
            self._discard_blob(file_id)
            raise StorageFailureError(f"Could not record {file_id}") from e

        logger.info(f"Uploaded file {file_id} ({record.size} bytes) [owner_id={principal_id}]")
        return record

    def list_files(self, principal_id: str) -> List[FileRecord]:
        if not principal_id:
            return []
        try:
            records = self.file_repo.list_visible_to(principal_id)
        except sqlite3.Error as e:
            raise StorageFailureError("Could not list files") from e
        return [record for record in records if is_allowed(Action.VIEW, record, principal_id)]

    def get_file(self, file_id: str, principal_id: str) -> FileRecord:
        return self._authorize(file_id, principal_id, Action.VIEW)

    def check_access(self, file_id: str, principal_id: str, action: Action) -> FileRecord:
        """
        Raise FileNotFoundError or ForbiddenError unless principal_id may
        perform action on file_id right now.

        Lets callers reject a request before validating its other inputs;
        the mutation itself re-checks under the record lock.
        """
        return self._authorize(file_id, principal_id, action)

    def download_file(self, file_id: str, principal_id: str) -> Tuple[FileRecord, Iterator[bytes]]:
        record = self._authorize(file_id, principal_id, Action.DOWNLOAD)
        try:
            stream = self.blob_store.stream(file_id)
        except BlobNotFoundError:
            logger.error(f"File {file_id} has a record but no content")
            raise FileNotFoundError(f"File {file_id} has no data")
        except OSError as e:
            raise StorageFailureError(f"Could not read {file_id}") from e

        logger.info(f"Starting download of file {file_id} ({record.size} bytes) [user_id={principal_id}]")
        return record, stream

    def read_file(self, file_id: str, principal_id: str) -> bytes:
        _, stream = self.download_file(file_id, principal_id)
        return b"".join(stream)

    def transfer_ownership(self, file_id: str, principal_id: str, new_owner_id: str) -> FileRecord:
        with self._locked_transaction(file_id) as conn:
            record = self._authorize(file_id, principal_id, Action.TRANSFER, conn=conn)

            if not new_owner_id or not self.user_repo.exists(new_owner_id):
                raise InvalidTargetError(f"Unknown user {new_owner_id!r}")

            updated = record.with_owner(new_owner_id)
            if updated != record:
                self.file_repo.put(updated, conn=conn)

        logger.info(f"Transferred file {file_id} from {principal_id} to {new_owner_id}")
        return updated

    def share_file(self, file_id: str, principal_id: str, targets: Iterable[str]) -> FileRecord:
        """
        Replace the share set of a file with targets.

        The owner is dropped from the set; every other target must be a
        registered user.
        """
        wanted = {target for target in targets if target}

        with self._locked_transaction(file_id) as conn:
            record = self._authorize(file_id, principal_id, Action.SHARE, conn=conn)
            wanted.discard(record.owner_id)

            unknown = self.user_repo.unknown_user_ids(wanted)
            if unknown:
                raise InvalidTargetError(f"Unknown users: {', '.join(sorted(unknown))}")

            updated = record.with_shares(wanted)
            if updated != record:
                self.file_repo.put(updated, conn=conn)

        logger.info(f"Shared file {file_id} with {len(updated.shared_to)} user(s) [owner_id={principal_id}]")
        return updated

    def revoke_access(self, file_id: str, principal_id: str, targets: Iterable[str]) -> FileRecord:
        revoked = set(targets)

        with self._locked_transaction(file_id) as conn:
            record = self._authorize(file_id, principal_id, Action.REVOKE, conn=conn)
            updated = record.with_shares(record.shared_to - revoked)
            if updated != record:
                self.file_repo.put(updated, conn=conn)

        logger.info(
            f"Revoked access to file {file_id} for {len(record.shared_to) - len(updated.shared_to)} user(s)"
        )
        return updated

    def delete_file(self, file_id: str, principal_id: str) -> None:
        with self._locked_transaction(file_id) as conn:
            self._authorize(file_id, principal_id, Action.DELETE, conn=conn)
            self.file_repo.delete(file_id, conn=conn)

        self._discard_blob(file_id)
        logger.info(f"Deleted file {file_id} [user_id={principal_id}]")

    def _authorize(self, file_id: str, principal_id: str, action: Action, conn=None) -> FileRecord:
        try:
            record = self.file_repo.get(file_id, conn=conn)
        except sqlite3.Error as e:
            raise StorageFailureError(f"Could not read record {file_id}") from e

        if record is None:
            raise FileNotFoundError(f"File {file_id} not found")

        if not is_allowed(action, record, principal_id):
            logger.warning(f"Denied {action.value} on file {file_id} [user_id={principal_id}]")
            raise ForbiddenError(f"User {principal_id} may not {action.value} file {file_id}")

        return record

    @contextmanager
    def _locked_transaction(self, file_id: str) -> Generator[sqlite3.Connection, None, None]:
        with self.locks.hold(file_id):
            try:
                with get_db_connection() as conn, write_transaction(conn):
                    yield conn
            except sqlite3.Error as e:
                logger.error(f"Metadata write failed [file_id={file_id}]: {e}", exc_info=True)
                raise StorageFailureError(f"Could not update {file_id}") from e

    def _record_exists(self, file_id: str) -> bool:
        try:
            return self.file_repo.exists(file_id)
        except sqlite3.Error as e:
            raise StorageFailureError(f"Could not read record {file_id}") from e

    def _discard_blob(self, file_id: str) -> bool:
        try:
            return self.blob_store.delete(file_id)
        except OSError as e:
            logger.warning(f"Could not delete blob {file_id}, leaving it for the sweeper: {e}")
            return False
