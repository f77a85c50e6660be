"""Tests for per-record locks."""

import threading
import time

from server.locks import RecordLockRegistry


def test_same_id_is_serialized():
    registry = RecordLockRegistry()
    inside = []
    overlaps = []

    def worker():
        with registry.hold("report.pdf"):
            if inside:
                overlaps.append(True)
            inside.append(True)
            time.sleep(0.01)
            inside.pop()

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []


def test_different_ids_do_not_block():
    registry = RecordLockRegistry()
    entered = threading.Event()

    with registry.hold("a.txt"):
        def other():
            with registry.hold("b.txt"):
                entered.set()

        t = threading.Thread(target=other)
        t.start()
        assert entered.wait(timeout=2)
        t.join()


def test_locks_released_after_use():
    registry = RecordLockRegistry()
    with registry.hold("a.txt"):
        assert registry.active_count() == 1
    assert registry.active_count() == 0


def test_lock_released_on_error():
    registry = RecordLockRegistry()
    try:
        with registry.hold("a.txt"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert registry.active_count() == 0
    with registry.hold("a.txt"):
        pass
