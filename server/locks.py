"""Per-record mutual exclusion for file mutations."""

import threading
from contextlib import contextmanager
from typing import Dict, Generator


class RecordLockRegistry:
    """
    Hands out one lock per file id.

    Locks are created on first use and dropped once no thread holds or
    waits on them, so the registry only grows with concurrent activity.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._users: Dict[str, int] = {}

    @contextmanager
    def hold(self, file_id: str) -> Generator[None, None, None]:
        with self._guard:
            lock = self._locks.setdefault(file_id, threading.Lock())
            self._users[file_id] = self._users.get(file_id, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._users[file_id] -= 1
                if self._users[file_id] == 0:
                    del self._users[file_id]
                    del self._locks[file_id]

    def active_count(self) -> int:
        with self._guard:
            return len(self._locks)


_registry = RecordLockRegistry()


def get_lock_registry() -> RecordLockRegistry:
    """Get the process-wide lock registry."""
    return _registry
