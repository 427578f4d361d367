"""Shared fixtures and ASGI helpers for the httpsession test suite."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from http.cookies import Morsel, SimpleCookie
from typing import Any

import httpx
import pytest
from pydantic import BaseModel

from httpsession.middleware.config import SessionConfig
from httpsession.middleware.registry import SessionRegistry
from httpsession.storage.memory import MemoryStore

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Counter(BaseModel):
    n: int = 0


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> MemoryStore:
    return MemoryStore(clock=clock)


@pytest.fixture()
def registry(store: MemoryStore, clock: FakeClock) -> SessionRegistry[Counter]:
    return SessionRegistry(Counter, SessionConfig(), store=store, clock=clock)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def fetch(app: Any, path: str = "/", cookie: str | None = None, **headers: str) -> httpx.Response:
    """Issue one GET against ``app`` with an optional session cookie."""
    request_headers = dict(headers)
    if cookie is not None:
        request_headers["Cookie"] = f"SESSIONID={cookie}"
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="https://testserver") as client:
        return await client.get(path, headers=request_headers)


def session_cookie(response: httpx.Response, name: str = "SESSIONID") -> Morsel | None:
    """Return the parsed session ``Set-Cookie`` of ``response``, if any."""
    for value in response.headers.get_list("set-cookie"):
        jar: SimpleCookie = SimpleCookie()
        jar.load(value)
        if name in jar:
            return jar[name]
    return None


async def call_asgi(app: Any, cookie_headers: list[str] | None = None) -> list[dict[str, Any]]:
    """Run ``app`` for a bare GET / and return every message it sent."""
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "https",
        "path": "/",
        "raw_path": b"/",
        "query_string": b"",
        "root_path": "",
        "headers": [(b"cookie", value.encode("latin-1")) for value in cookie_headers or []],
        "server": ("testserver", 443),
        "client": ("testclient", 50000),
    }
    sent: list[dict[str, Any]] = []

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message: dict[str, Any]) -> None:
        sent.append(message)

    await app(scope, receive, send)
    return sent
