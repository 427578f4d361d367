"""At-most-one in-flight request per session ID.

Classes
-------
- ConcurrentSessionConflict  — raised when an ID is already in use
- ActiveSessionGuard         — thread-safe set with insert-if-absent
"""
from __future__ import annotations

import threading


class ConcurrentSessionConflict(Exception):
    """Raised when a request arrives for a session another request holds.

    Parameters
    ----------
    session_id:
        The contested session ID.
    """

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("httpsession: another request is using this session")


class ActiveSessionGuard:
    """Registry of session IDs currently checked out to a request.

    Conflicting requests are rejected, never queued.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: set[str] = set()

    def acquire(self, session_id: str) -> bool:
        """Register ``session_id``; return False if it was already registered."""
        with self._lock:
            if session_id in self._active:
                return False
            self._active.add(session_id)
            return True

    def release(self, session_id: str) -> None:
        """Unregister ``session_id``.  Idempotent."""
        with self._lock:
            self._active.discard(session_id)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._active

    def __len__(self) -> int:
        with self._lock:
            return len(self._active)
