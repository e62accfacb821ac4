"""Advisory locks scoped to scheduling keys such as ("room", 3, "Monday").

On PostgreSQL the lock is a transaction-level advisory lock, released by the
server on commit or rollback. Every other dialect falls back to a process-wide
registry of re-entrant locks which the caller releases once its transaction
has ended.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Sequence
from threading import Lock, RLock

from sqlalchemy import text
from sqlalchemy.orm import Session

LockKey = Sequence[object]


def lock_name(key: LockKey) -> str:
    return ":".join(str(getattr(part, "value", part)) for part in key)


def lock_id(name: str) -> int:
    digest = hashlib.blake2b(name.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


class LocalLockRegistry:
    """Named re-entrant locks, kept only while some thread holds or waits on them."""

    def __init__(self) -> None:
        self._locks: dict[str, RLock] = {}
        self._users: dict[str, int] = {}
        self._guard = Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def acquire(self, name: str) -> RLock:
        with self._guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = RLock()
                self._locks[name] = lock
            self._users[name] = self._users.get(name, 0) + 1
        lock.acquire()
        return lock

    def release(self, name: str, lock: RLock) -> None:
        lock.release()
        with self._guard:
            remaining = self._users.get(name, 0) - 1
            if remaining > 0:
                self._users[name] = remaining
                return
            self._users.pop(name, None)
            if self._locks.get(name) is lock:
                del self._locks[name]

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()
            self._users.clear()


_registry = LocalLockRegistry()

HeldLock = tuple[str, RLock]


def acquire_advisory_locks(db: Session, keys: Iterable[LockKey]) -> list[HeldLock]:
    """Acquire every key in sorted order and return the locks the caller must release.

    PostgreSQL locks are owned by the transaction, so the returned list is empty.
    """
    names = sorted({lock_name(key) for key in keys})
    if not names:
        return []

    if db.get_bind().dialect.name == "postgresql":
        for name in names:
            db.execute(text("SELECT pg_advisory_xact_lock(:lock_id)"), {"lock_id": lock_id(name)})
        return []

    return [(name, _registry.acquire(name)) for name in names]


def release_local_locks(locks: list[HeldLock]) -> None:
    while locks:
        name, lock = locks.pop()
        _registry.release(name, lock)


def local_lock_count() -> int:
    return len(_registry)


def clear_lock_registry() -> None:
    _registry.clear()
