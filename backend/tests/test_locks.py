import threading

import pytest

from app.db.locks import LocalLockRegistry, local_lock_count, lock_id, lock_name
from app.models.schedule import DayOfWeek


def test_lock_name_uses_enum_values():
    assert lock_name(("room", 3, DayOfWeek.monday)) == "room:3:Monday"


def test_lock_id_is_stable_signed_64_bit():
    first = lock_id("room:3:Monday")
    assert first == lock_id("room:3:Monday")
    assert first != lock_id("room:3:Tuesday")
    assert -(2**63) <= first < 2**63


def test_lock_outside_transaction_is_refused(storage):
    with pytest.raises(RuntimeError, match="inside a transaction"):
        storage.lock(("room", 1, "Monday"))


def test_local_locks_are_released_after_rollback(storage):
    with pytest.raises(ValueError):
        with storage.transaction():
            storage.lock(("room", 1, "Monday"))
            raise ValueError("boom")

    assert storage._held_locks == []


def test_local_locks_are_evicted_once_released(storage):
    with storage.transaction():
        storage.lock(("room", 1, "Monday"), ("class", 4, "Monday"))
        storage.lock(("room", 1, "Monday"))
        assert local_lock_count() == 2

    assert local_lock_count() == 0


def test_registry_keeps_lock_while_another_thread_waits():
    registry = LocalLockRegistry()
    first = registry.acquire("room:1:Monday")
    waiting = threading.Event()
    acquired = threading.Event()

    def contender():
        waiting.set()
        lock = registry.acquire("room:1:Monday")
        acquired.set()
        registry.release("room:1:Monday", lock)

    thread = threading.Thread(target=contender)
    thread.start()
    waiting.wait(timeout=5)
    assert not acquired.wait(timeout=0.1)

    registry.release("room:1:Monday", first)
    thread.join(timeout=5)

    assert acquired.is_set()
    assert len(registry) == 0
