"""ASGI ``send`` wrapper that commits the session on the first write.

Classes
-------
- ResponseInterceptor  — runs the save protocol once, before the response
  start (or first body chunk) reaches the client
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from starlette.datastructures import MutableHeaders
from starlette.types import Message, Send

logger = logging.getLogger(__name__)

CommitCallback = Callable[[], Awaitable[list[str]]]
ErrorCallback = Callable[[Exception], Awaitable[None]]

_TRIGGER_MESSAGES = frozenset({"http.response.start", "http.response.body"})


class ResponseInterceptor:
    """Decorates the downstream ``send`` callable.

    The first ``http.response.start`` or ``http.response.body`` message runs
    ``commit``, whose result is a list of ``Set-Cookie`` values appended to
    the start message.  If ``commit`` raises, ``on_error`` is called once
    to write an error response through the original ``send`` and every
    message the application sends afterwards is dropped.

    Parameters
    ----------
    send:
        The ASGI ``send`` callable being wrapped.
    commit:
        Coroutine function running the deferred save protocol.
    on_error:
        Coroutine function reporting a failed commit.
    """

    def __init__(self, send: Send, commit: CommitCallback, on_error: ErrorCallback) -> None:
        self._send = send
        self._commit = commit
        self._on_error = on_error
        self._committed = False
        self._failed = False

    async def __call__(self, message: Message) -> None:
        if self._failed:
            return
        message_type = message["type"]
        if not self._committed and message_type in _TRIGGER_MESSAGES:
            try:
                cookies = await self._commit()
            except Exception as exc:
                self._failed = True
                logger.debug("ResponseInterceptor: commit failed on %s", message_type)
                await self._on_error(exc)
                return
            self._committed = True
            if cookies and message_type == "http.response.start":
                headers = MutableHeaders(scope=message)
                for value in cookies:
                    headers.append("set-cookie", value)
        await self._send(message)

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def failed(self) -> bool:
        return self._failed

    @property
    def triggered(self) -> bool:
        """True once the save protocol has run, successfully or not."""
        return self._committed or self._failed

    def unwrap(self) -> Send:
        """Return the wrapped ``send`` callable."""
        return self._send
