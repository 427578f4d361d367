"""Session store subpackage.

All stores implement the ``SessionStore`` ABC and are interchangeable
behind the middleware.

Public surface
--------------
- SessionStore  — abstract base class
- MemoryStore   — in-process dict with a reader/writer lock (default)
- SQLiteStore   — aiosqlite-backed store (requires ``aiosqlite``)
"""
from __future__ import annotations

from httpsession.storage.base import SessionStore
from httpsession.storage.memory import MemoryStore, ReadWriteLock
from httpsession.storage.sqlite import SQLiteStore

__all__ = [
    "MemoryStore",
    "ReadWriteLock",
    "SQLiteStore",
    "SessionStore",
]
