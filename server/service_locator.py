"""Service locator for process-wide components."""

from typing import Optional, TYPE_CHECKING

from blobstore.blob_storage import LocalBlobStore

if TYPE_CHECKING:
    from server.cleanup_task import OrphanedBlobSweeper

_blob_store: Optional[LocalBlobStore] = None
_sweeper: Optional['OrphanedBlobSweeper'] = None


def set_blob_store(store: Optional[LocalBlobStore]):
    """Set global blob store instance"""
    global _blob_store
    _blob_store = store


def get_blob_store() -> LocalBlobStore:
    """Get global blob store instance, creating the default on first use"""
    global _blob_store
    if _blob_store is None:
        _blob_store = LocalBlobStore()
    return _blob_store


def set_sweeper(sweeper):
    """Set global orphan sweeper instance"""
    global _sweeper
    _sweeper = sweeper


def get_sweeper() -> Optional['OrphanedBlobSweeper']:
    """Get global orphan sweeper instance"""
    return _sweeper
