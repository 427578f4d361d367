"""Abstract base class for session stores.

Every backend the middleware can use implements the four coroutines defined
here.  Stores only ever see encoded payloads (``Record.data``); decoding is
the middleware's job.

Classes
-------
- SessionStore  — abstract base for all stores
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from httpsession.session.record import Record


class SessionStore(ABC):
    """Contract for loading and persisting session records.

    Implementations must tolerate concurrent calls for independent IDs.
    The middleware guarantees that at most one request works on a given ID
    at a time, but does not serialise calls across IDs.

    Expired records follow a lazy-expiry rule: a record whose
    ``idle_deadline`` has passed must look absent to ``load`` whether or not
    it is still physically stored, and ``save`` may silently skip it.
    """

    @abstractmethod
    async def load(self, record_id: str) -> Record | None:
        """Return the record stored under ``record_id``.

        Parameters
        ----------
        record_id:
            The session ID taken from the request cookie.

        Returns
        -------
        Record | None
            A fresh copy of the stored record, or None if it does not exist
            or has expired.
        """

    @abstractmethod
    async def save(self, record: Record) -> None:
        """Insert or replace ``record``.

        Parameters
        ----------
        record:
            The record to persist.  Only ``id``, the deadlines, and ``data``
            are stored.
        """

    @abstractmethod
    async def delete(self, record_id: str) -> None:
        """Remove the record for ``record_id``.  Missing IDs are not an error."""

    @abstractmethod
    async def delete_expired(self) -> None:
        """Remove every record whose idle deadline has passed."""


__all__ = ["SessionStore"]
