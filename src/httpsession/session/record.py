"""Session record model and deadline arithmetic.

A ``Record`` is the unit a ``SessionStore`` persists: the session ID, its
two deadlines, and the encoded payload.  While a record is checked out to a
request it additionally carries the decoded payload and the per-request
bookkeeping flags, none of which are ever persisted.

Classes
-------
- Record  — persisted session state plus transient request flags

Functions
---------
- new_session_id  — generate an opaque, URL-safe session identifier
- utcnow          — timezone-aware UTC wall clock
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any

_ID_BYTES = 32


def new_session_id() -> str:
    """Return a fresh random session ID.

    32 random bytes, URL-safe base64 without padding, so the value can be
    placed in a cookie without quoting.
    """
    return secrets.token_urlsafe(_ID_BYTES)


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class Record:
    """Information about one HTTP session.

    Parameters
    ----------
    id:
        Opaque unique identifier; also the cookie value.
    absolute_deadline:
        Hard cap on the session's lifetime, fixed at creation or renewal.
    idle_deadline:
        Sliding expiry refreshed on every save.  ``None`` until the record
        is saved for the first time.
    data:
        Encoded payload as produced by a ``Codec``.
    session:
        Decoded payload.  Transient.
    dirty:
        True once the payload was handed out for mutation this request.
        Transient.
    deleted:
        True once deletion was requested this request.  Transient.
    replaced_ids:
        IDs this record carried earlier in the request, before renewal.
        Transient.
    """

    id: str
    absolute_deadline: datetime
    idle_deadline: datetime | None = None
    data: bytes = b""

    session: Any = field(default=None, repr=False, compare=False)
    dirty: bool = field(default=False, compare=False)
    deleted: bool = field(default=False, compare=False)
    replaced_ids: list[str] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def create(
        cls,
        now: datetime,
        absolute_timeout: timedelta,
        session: Any = None,
        record_id: str | None = None,
    ) -> Record:
        """Return a brand-new, never-saved record."""
        return cls(
            id=record_id or new_session_id(),
            absolute_deadline=now + absolute_timeout,
            session=session,
        )

    def is_expired(self, now: datetime) -> bool:
        """Return True if the idle deadline is set and not after ``now``."""
        return self.idle_deadline is not None and self.idle_deadline <= now

    def touch(self, now: datetime, idle_timeout: timedelta) -> datetime:
        """Slide the idle deadline forward, capped by the absolute deadline."""
        self.idle_deadline = min(now + idle_timeout, self.absolute_deadline)
        return self.idle_deadline

    def renew(self, new_id: str, now: datetime, absolute_timeout: timedelta) -> None:
        """Replace the ID and restart the absolute lifetime."""
        if new_id != self.id:
            self.replaced_ids.append(self.id)
        self.id = new_id
        self.absolute_deadline = now + absolute_timeout
        self.dirty = True

    def persisted_copy(self) -> Record:
        """Return a copy holding only the fields a store keeps."""
        return replace(
            self,
            session=None,
            dirty=False,
            deleted=False,
            replaced_ids=[],
        )
