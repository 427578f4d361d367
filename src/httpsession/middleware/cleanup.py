"""Periodic purge of expired session records.

Classes
-------
- CleanupTask  — background asyncio task calling ``delete_expired``
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta

from httpsession.storage.base import SessionStore

logger = logging.getLogger(__name__)


class CleanupTask:
    """Wake every ``interval`` and ask ``store`` to drop expired records.

    Failures are logged and the task carries on with the next tick.  Use it
    as an async context manager, or call ``start()`` and ``stop()``.

    Parameters
    ----------
    store:
        The store to purge.
    interval:
        Time between purges, as a ``timedelta`` or seconds.
    """

    def __init__(self, store: SessionStore, interval: timedelta | float) -> None:
        seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        if seconds <= 0:
            raise ValueError("interval must be positive")
        self._store = store
        self._interval = seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the purge loop on the running event loop."""
        if self.running:
            raise RuntimeError("CleanupTask is already running")
        self._task = asyncio.create_task(self._run(), name="httpsession-cleanup")
        logger.debug("CleanupTask: started, interval=%ss", self._interval)

    async def stop(self) -> None:
        """Cancel the purge loop and wait until it has exited."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("CleanupTask: stopped")

    async def run_once(self) -> None:
        """Purge now; errors are logged, not raised."""
        try:
            await self._store.delete_expired()
        except Exception:
            logger.exception("CleanupTask: delete_expired failed")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()

    async def __aenter__(self) -> CleanupTask:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.stop()
