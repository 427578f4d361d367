"""Cookie-based HTTP session tracking for ASGI applications.

``SessionRegistry`` owns the configuration, the store and the concurrency
guard.  ``SessionMiddleware`` is the ASGI entry point that hands each
``http`` request to the registry.

Per request the registry:

1. resolves the session cookie and loads the record, or creates a new one;
2. registers the record ID with the guard, rejecting concurrent requests
   for the same session;
3. attaches a ``SessionHandle`` to the request scope and runs the app;
4. runs the save protocol once, when the app starts its response (or after
   the app returns, if it sent nothing);
5. closes the handle and releases the guard.

Classes
-------
- SessionRegistry    — request-scoped record acquisition and deferred save
- SessionMiddleware  — ASGI middleware delegating to a registry

Functions
---------
- default_error_handler  — log the error and answer 500
- cookies_named          — all values of one cookie name in a request
"""
from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from datetime import datetime
from http import HTTPStatus
from typing import Any, Generic, TypeVar, Union

from starlette.requests import HTTPConnection, Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from httpsession.middleware.cleanup import CleanupTask
from httpsession.middleware.config import SessionConfig
from httpsession.middleware.guard import ActiveSessionGuard, ConcurrentSessionConflict
from httpsession.middleware.interceptor import ResponseInterceptor
from httpsession.session.codec import Codec, JSONCodec
from httpsession.session.handle import SessionHandle, SessionNotActiveError
from httpsession.session.record import Record, utcnow
from httpsession.storage.base import SessionStore
from httpsession.storage.memory import MemoryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorHandler = Callable[[Request, Exception], Union[Response, Awaitable[Response]]]


def default_error_handler(request: Request, exc: Exception) -> Response:
    """Log ``exc`` and return a generic 500 response."""
    logger.error("httpsession: %s %s: %s", request.method, request.url.path, exc)
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    return PlainTextResponse(status.phrase, status_code=status.value)


def cookies_named(scope: Scope, name: str) -> list[str]:
    """Return every value of cookie ``name`` across all Cookie headers.

    Empty values are kept so that ``name=; name=x`` counts as two cookies.
    """
    values: list[str] = []
    for key, raw in scope.get("headers", ()):
        if key.lower() != b"cookie":
            continue
        for chunk in raw.decode("latin-1").split(";"):
            cookie_name, sep, value = chunk.partition("=")
            if not sep or cookie_name.strip() != name:
                continue
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] == '"':
                value = value[1:-1]
            values.append(value)
    return values


class SessionRegistry(Generic[T]):
    """Track HTTP sessions of payload type ``T`` through a cookie.

    Parameters
    ----------
    session_factory:
        Zero-argument callable returning the payload for a new session,
        usually the payload class itself.
    config:
        Timeouts and cookie template.  Defaults to ``SessionConfig()``.
    store:
        Backing store.  Defaults to a fresh ``MemoryStore``.
    codec:
        Payload codec.  Defaults to ``JSONCodec(session_factory)``, which
        requires ``session_factory`` to be a type.
    error_handler:
        Called with the request and the exception for store failures, codec
        failures and concurrent-session conflicts; returns the response to
        send.  May be a coroutine function.
    clock:
        Returns the current UTC time.  Defaults to the wall clock.
    """

    def __init__(
        self,
        session_factory: Callable[[], T],
        config: SessionConfig | None = None,
        *,
        store: SessionStore | None = None,
        codec: Codec[T] | None = None,
        error_handler: ErrorHandler | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._clock = clock or utcnow
        if codec is None:
            if not isinstance(session_factory, type):
                raise TypeError("a codec is required when session_factory is not a type")
            codec = JSONCodec(session_factory)
        self._session_factory = session_factory
        self._config = config or SessionConfig()
        self._store = store if store is not None else MemoryStore(clock=self._clock)
        self._codec = codec
        self._error_handler = error_handler or default_error_handler
        self._guard = ActiveSessionGuard()
        self._scope_key = f"httpsession.handle.{id(self):x}"

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def guard(self) -> ActiveSessionGuard:
        return self._guard

    # ------------------------------------------------------------------
    # Handler-facing API
    # ------------------------------------------------------------------

    def handle(self, conn: HTTPConnection | Scope) -> SessionHandle[T]:
        """Return the session handle attached to ``conn``.

        Raises
        ------
        SessionNotActiveError
            If ``conn`` did not pass through this registry's middleware.
        """
        scope = conn.scope if isinstance(conn, HTTPConnection) else conn
        handle = scope.get(self._scope_key)
        if handle is None:
            raise SessionNotActiveError()
        return handle

    def get(self, conn: HTTPConnection | Scope) -> T:
        """Return the mutable session payload; it will be saved."""
        return self.handle(conn).get()

    def read(self, conn: HTTPConnection | Scope) -> T:
        """Return a read-only copy of the session payload."""
        return self.handle(conn).read()

    def delete(self, conn: HTTPConnection | Scope) -> None:
        """Delete the session when the response starts."""
        self.handle(conn).delete()

    def renew(self, conn: HTTPConnection | Scope) -> str:
        """Move the session to a new random ID and return it."""
        return self.handle(conn).renew()

    def renew_with_id(self, conn: HTTPConnection | Scope, session_id: str) -> str:
        """Move the session to ``session_id``."""
        return self.handle(conn).renew_with_id(session_id)

    def session_id(self, conn: HTTPConnection | Scope) -> str:
        return self.handle(conn).session_id

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def wrap(self, app: ASGIApp) -> SessionMiddleware:
        """Return ``app`` wrapped in a ``SessionMiddleware`` for this registry."""
        return SessionMiddleware(app, registry=self)

    def cleanup_task(self, interval: Any = None) -> CleanupTask:
        """Return an unstarted ``CleanupTask`` for the store.

        ``interval`` defaults to ``config.cleanup_interval``.
        """
        interval = interval if interval is not None else self._config.cleanup_interval
        if interval is None:
            raise ValueError("no cleanup interval configured")
        return CleanupTask(self._store, interval)

    @contextlib.asynccontextmanager
    async def lifespan(self, app: object = None) -> AsyncIterator[None]:
        """Starlette ``lifespan`` running the cleanup task while the app is up."""
        if self._config.cleanup_interval is None:
            yield
            return
        async with self.cleanup_task():
            yield

    async def populate(self, sessions: Mapping[str, T]) -> None:
        """Save ``sessions`` (ID to payload) directly into the store."""
        now = self._clock()
        for session_id, session in sessions.items():
            record = Record.create(now, self._config.absolute_timeout, session, record_id=session_id)
            record.touch(now, self._config.idle_timeout)
            record.data = self._codec.encode(session)
            await self._store.save(record)

    # ------------------------------------------------------------------
    # Request processing
    # ------------------------------------------------------------------

    async def dispatch(self, app: ASGIApp, scope: Scope, receive: Receive, send: Send) -> None:
        """Run ``app`` for one ``http`` request with session tracking."""
        request = Request(scope, receive)

        async def report(exc: Exception) -> None:
            await self._report(request, exc, send)

        try:
            record = await self._load_or_create(scope)
        except Exception as exc:
            await report(exc)
            return

        session_id = record.id
        if not self._guard.acquire(session_id):
            logger.debug("SessionRegistry: concurrent request for session rejected")
            await report(ConcurrentSessionConflict(session_id))
            return

        handle: SessionHandle[T] = SessionHandle(record, self._config.absolute_timeout, self._clock)
        try:
            scope[self._scope_key] = handle
            interceptor = ResponseInterceptor(send, lambda: self._commit(record), report)
            await app(scope, receive, interceptor)
            if not interceptor.triggered:
                try:
                    await self._commit(record)
                except Exception as exc:
                    await report(exc)
        finally:
            handle.close()
            self._guard.release(session_id)

    async def _load_or_create(self, scope: Scope) -> Record:
        now = self._clock()
        values = cookies_named(scope, self._config.cookie.name)
        record: Record | None = None
        if len(values) == 1 and values[0]:
            record = await self._store.load(values[0])
            if record is not None and (record.idle_deadline is None or record.is_expired(now)):
                record = None
        elif len(values) > 1:
            logger.debug("SessionRegistry: %d session cookies presented, starting fresh", len(values))

        if record is None:
            record = Record.create(now, self._config.absolute_timeout, self._session_factory())
            logger.debug("SessionRegistry: created session")
            return record

        record.session = self._codec.decode(record.data)
        return record

    async def _commit(self, record: Record) -> list[str]:
        """Persist or delete ``record`` and return the cookies to set."""
        cookie = self._config.cookie
        if record.deleted:
            for record_id in (*record.replaced_ids, record.id):
                await self._store.delete(record_id)
            logger.debug("SessionRegistry: deleted session")
            return [cookie.expired()]

        if not record.dirty:
            return []

        now = self._clock()
        idle_deadline = record.touch(now, self._config.idle_timeout)
        record.data = self._codec.encode(record.session)
        for record_id in record.replaced_ids:
            await self._store.delete(record_id)
        await self._store.save(record)
        logger.debug("SessionRegistry: saved session")

        max_age = int((idle_deadline - now).total_seconds())
        if max_age <= 0:
            return [cookie.expired()]
        return [cookie.render(record.id, max_age)]

    async def _report(self, request: Request, exc: Exception, send: Send) -> None:
        response = self._error_handler(request, exc)
        if inspect.isawaitable(response):
            response = await response
        await response(request.scope, request.receive, send)


class SessionMiddleware:
    """ASGI middleware adding cookie-based sessions to ``app``.

    Non-``http`` scopes (``lifespan``, ``websocket``) pass through.

    Parameters
    ----------
    app:
        The downstream ASGI application.
    registry:
        The registry that owns configuration, store and guard.
    """

    def __init__(self, app: ASGIApp, registry: SessionRegistry[Any]) -> None:
        self.app = app
        self.registry = registry

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        await self.registry.dispatch(self.app, scope, receive, send)
