"""SQLite session store — requires aiosqlite (guarded import).

One row per session.  Deadlines are stored as fixed-width UTC ISO-8601
strings, which sort lexicographically in time order, so expiry checks are
plain string comparisons that can use the ``idle_deadline`` index.

Classes
-------
- SQLiteStore  — aiosqlite-backed session store
"""
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from httpsession.session.record import Record, utcnow
from httpsession.storage.base import SessionStore

_AIOSQLITE_IMPORT_ERROR = (
    "SQLiteStore requires the 'aiosqlite' package. "
    "Install it with: pip install aiosqlite  or  pip install 'httpsession[sqlite]'"
)

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS httpsession (
    id                TEXT PRIMARY KEY,
    idle_deadline     TEXT NOT NULL,
    absolute_deadline TEXT NOT NULL,
    data              BLOB NOT NULL
)
"""

_CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS httpsession_idle_deadline_idx
    ON httpsession (idle_deadline)
"""

_LOAD_SQL = """
SELECT id, idle_deadline, absolute_deadline, data
FROM httpsession
WHERE id = ? AND idle_deadline > ?
"""

_UPSERT_SQL = """
INSERT INTO httpsession (id, idle_deadline, absolute_deadline, data)
VALUES (?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    idle_deadline     = excluded.idle_deadline,
    absolute_deadline = excluded.absolute_deadline,
    data              = excluded.data
"""

_DELETE_SQL = "DELETE FROM httpsession WHERE id = ?"

_DELETE_EXPIRED_SQL = "DELETE FROM httpsession WHERE idle_deadline <= ?"

_COUNT_SQL = "SELECT COUNT(*) FROM httpsession WHERE idle_deadline > ?"

_COUNT_ALL_SQL = "SELECT COUNT(*) FROM httpsession"


def format_timestamp(value: datetime) -> str:
    """Render ``value`` in the sortable column format."""
    return value.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Inverse of ``format_timestamp``."""
    return datetime.strptime(value, _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


class SQLiteStore(SessionStore):
    """Persists session records in a local SQLite database using aiosqlite.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  The parent directory and the table are
        created on first use.
    clock:
        Returns the current UTC time.  Defaults to the wall clock.
    """

    def __init__(
        self,
        db_path: str | Path,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        try:
            import aiosqlite as _aiosqlite  # noqa: F401
        except ImportError as exc:
            raise ImportError(_AIOSQLITE_IMPORT_ERROR) from exc

        self._db_path = Path(db_path)
        self._clock = clock or utcnow
        self._schema_initialised = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _ensure_schema(self) -> None:
        """Create the table and its index on first use."""
        if self._schema_initialised:
            return
        import aiosqlite

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute(_CREATE_TABLE_SQL)
            await conn.execute(_CREATE_INDEX_SQL)
            await conn.commit()
        self._schema_initialised = True

    def _now(self) -> str:
        return format_timestamp(self._clock())

    # ------------------------------------------------------------------
    # SessionStore interface
    # ------------------------------------------------------------------

    async def load(self, record_id: str) -> Record | None:
        import aiosqlite

        await self._ensure_schema()
        async with aiosqlite.connect(str(self._db_path)) as conn:
            async with conn.execute(_LOAD_SQL, (record_id, self._now())) as cursor:
                row = await cursor.fetchone()
        if row is None:
            return None
        return Record(
            id=str(row[0]),
            idle_deadline=parse_timestamp(row[1]),
            absolute_deadline=parse_timestamp(row[2]),
            data=bytes(row[3]),
        )

    async def save(self, record: Record) -> None:
        """Upsert ``record``; already-expired records are skipped."""
        import aiosqlite

        if record.idle_deadline is None:
            raise ValueError(f"record {record.id!r} has no idle deadline")
        if record.is_expired(self._clock()):
            return
        await self._ensure_schema()
        async with aiosqlite.connect(str(self._db_path)) as conn:
            await conn.execute(
                _UPSERT_SQL,
                (
                    record.id,
                    format_timestamp(record.idle_deadline),
                    format_timestamp(record.absolute_deadline),
                    record.data,
                ),
            )
            await conn.commit()

    async def delete(self, record_id: str) -> None:
        import aiosqlite

        await self._ensure_schema()
        async with aiosqlite.connect(str(self._db_path)) as conn:
            await conn.execute(_DELETE_SQL, (record_id,))
            await conn.commit()

    async def delete_expired(self) -> None:
        import aiosqlite

        await self._ensure_schema()
        async with aiosqlite.connect(str(self._db_path)) as conn:
            await conn.execute(_DELETE_EXPIRED_SQL, (self._now(),))
            await conn.commit()

    # ------------------------------------------------------------------
    # Extras
    # ------------------------------------------------------------------

    async def count(self) -> int:
        """Return the number of unexpired records."""
        import aiosqlite

        await self._ensure_schema()
        async with aiosqlite.connect(str(self._db_path)) as conn:
            async with conn.execute(_COUNT_SQL, (self._now(),)) as cursor:
                row = await cursor.fetchone()
        return int(row[0]) if row else 0

    async def count_all(self) -> int:
        """Return the number of stored rows, expired ones included."""
        import aiosqlite

        await self._ensure_schema()
        async with aiosqlite.connect(str(self._db_path)) as conn:
            async with conn.execute(_COUNT_ALL_SQL) as cursor:
                row = await cursor.fetchone()
        return int(row[0]) if row else 0

    def __repr__(self) -> str:
        return f"SQLiteStore(db_path={str(self._db_path)!r})"


__all__ = ["SQLiteStore", "format_timestamp", "parse_timestamp"]
