"""Request-scoped access to a checked-out session record.

A ``SessionHandle`` is created by the middleware for exactly one request and
closed when that request finishes.  Nothing here touches a store: all
operations only flip flags on the record, and the middleware turns those
flags into at most one store call when the response starts.

Classes
-------
- SessionNotActiveError  — access outside a wrapped request
- SessionDeletedError    — access after ``delete()`` in the same request
- SessionHandle          — get / read / delete / renew for one request
"""
from __future__ import annotations

import copy
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Generic, TypeVar

from httpsession.session.record import Record, new_session_id

T = TypeVar("T")


class SessionNotActiveError(RuntimeError):
    """Raised when a session is accessed outside a request the middleware wraps."""

    def __init__(self, detail: str = "session middleware is not active for this request") -> None:
        super().__init__(f"httpsession: {detail}")


class SessionDeletedError(RuntimeError):
    """Raised when a deleted session is accessed again in the same request."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("httpsession: session already deleted")


class SessionHandle(Generic[T]):
    """Mutable view of one record for the lifetime of one request.

    Parameters
    ----------
    record:
        The record checked out for this request.
    absolute_timeout:
        Lifetime granted to the record on renewal.
    clock:
        Returns the current UTC time.
    """

    def __init__(
        self,
        record: Record,
        absolute_timeout: timedelta,
        clock: Callable[[], datetime],
    ) -> None:
        self._record = record
        self._absolute_timeout = absolute_timeout
        self._clock = clock
        self._closed = False

    # ------------------------------------------------------------------
    # Payload access
    # ------------------------------------------------------------------

    def get(self) -> T:
        """Return the live payload and mark the session for saving."""
        record = self._checked()
        record.dirty = True
        return record.session

    def read(self) -> T:
        """Return a private copy of the payload without marking it dirty."""
        record = self._checked()
        return copy.deepcopy(record.session)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def delete(self) -> None:
        """Request deletion of the session.  Calling it twice is harmless."""
        record = self._open()
        record.deleted = True

    def renew(self) -> str:
        """Move the session to a freshly generated ID and return it."""
        return self.renew_with_id(new_session_id())

    def renew_with_id(self, session_id: str) -> str:
        """Move the session to ``session_id``.

        Choosing an ID that no other session uses is the caller's
        responsibility.
        """
        if not session_id:
            raise ValueError("session_id must be a non-empty string")
        record = self._checked()
        record.renew(session_id, self._clock(), self._absolute_timeout)
        return session_id

    @property
    def session_id(self) -> str:
        return self._open().id

    @property
    def record(self) -> Record:
        return self._record

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _open(self) -> Record:
        if self._closed:
            raise SessionNotActiveError("session handle used after its request finished")
        return self._record

    def _checked(self) -> Record:
        record = self._open()
        if record.deleted:
            raise SessionDeletedError(record.id)
        return record

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"SessionHandle(id={self._record.id!r}, {state})"
