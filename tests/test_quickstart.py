"""Test the quickstart flow for httpsession: count, persist, renew."""
from __future__ import annotations

import pytest
from conftest import Counter, call_asgi, fetch, session_cookie
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route


def test_quickstart_import() -> None:
    from httpsession import SessionMiddleware, SessionRegistry

    registry = SessionRegistry(Counter)
    middleware = registry.wrap(PlainTextResponse("ok"))
    assert isinstance(middleware, SessionMiddleware)
    assert middleware.registry is registry


@pytest.mark.asyncio
async def test_quickstart_counter_flow() -> None:
    from httpsession import MemoryStore, SessionMiddleware, SessionRegistry

    store = MemoryStore()
    registry = SessionRegistry(Counter, store=store)

    async def count(request: Request) -> Response:
        registry.get(request).n += 1
        return PlainTextResponse(str(registry.read(request).n))

    async def login(request: Request) -> Response:
        registry.renew_with_id(request, "known")
        return PlainTextResponse(str(registry.read(request).n))

    app = Starlette(
        routes=[Route("/", count), Route("/login", login)],
        middleware=[Middleware(SessionMiddleware, registry=registry)],
    )

    first = await fetch(app, "/")
    c1 = session_cookie(first).value
    assert first.text == "1"

    second = await fetch(app, "/", cookie=c1)
    assert second.text == "2"
    assert session_cookie(second).value == c1

    third = await fetch(app, "/login", cookie=c1)
    assert third.text == "2"
    assert session_cookie(third).value == "known"
    assert await store.load(c1) is None
    known = await store.load("known")
    assert known is not None and known.data == b'{"n":2}'


@pytest.mark.asyncio
async def test_quickstart_wrap_plain_asgi_app() -> None:
    from httpsession import SessionRegistry

    registry = SessionRegistry(Counter)

    async def app(scope, receive, send) -> None:
        registry.get(scope).n += 1
        await PlainTextResponse("ok")(scope, receive, send)

    sent = await call_asgi(registry.wrap(app))
    headers = dict(sent[0]["headers"])
    assert headers[b"set-cookie"].startswith(b"SESSIONID=")
