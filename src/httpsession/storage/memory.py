"""In-memory session store.

Keeps records in a plain dict guarded by a single reader/writer lock.  All
data is lost when the process exits; this store is the default for the
middleware and the reference for third-party backends.

Classes
-------
- ReadWriteLock  — shared/exclusive lock built on ``threading.Condition``
- MemoryStore    — dict-backed ephemeral store
"""
from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

from httpsession.session.record import Record, utcnow
from httpsession.storage.base import SessionStore


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Writers are preferred: once a writer is waiting, new readers queue
    behind it so a steady stream of loads cannot starve a save.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MemoryStore(SessionStore):
    """Ephemeral, in-process store backed by a Python dict.

    Parameters
    ----------
    clock:
        Returns the current UTC time; used for the lazy-expiry checks.
        Defaults to the wall clock.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._records: dict[str, Record] = {}
        self._lock = ReadWriteLock()
        self._clock = clock or utcnow

    # ------------------------------------------------------------------
    # SessionStore interface
    # ------------------------------------------------------------------

    async def load(self, record_id: str) -> Record | None:
        now = self._clock()
        with self._lock.read():
            record = self._records.get(record_id)
        if record is None or record.is_expired(now):
            return None
        return record.persisted_copy()

    async def save(self, record: Record) -> None:
        """Store a copy of ``record``; already-expired records are skipped."""
        if record.idle_deadline is None:
            raise ValueError(f"record {record.id!r} has no idle deadline")
        if record.is_expired(self._clock()):
            return
        stored = record.persisted_copy()
        with self._lock.write():
            self._records[stored.id] = stored

    async def delete(self, record_id: str) -> None:
        with self._lock.write():
            self._records.pop(record_id, None)

    async def delete_expired(self) -> None:
        now = self._clock()
        with self._lock.write():
            expired = [rid for rid, rec in self._records.items() if rec.is_expired(now)]
            for record_id in expired:
                del self._records[record_id]

    # ------------------------------------------------------------------
    # Extras
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Remove all stored records."""
        with self._lock.write():
            self._records.clear()

    def __contains__(self, record_id: object) -> bool:
        with self._lock.read():
            return record_id in self._records

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._records)

    def __repr__(self) -> str:
        return f"MemoryStore(records={len(self)})"


__all__ = ["MemoryStore", "ReadWriteLock"]
