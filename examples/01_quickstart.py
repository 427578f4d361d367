#!/usr/bin/env python3
"""Example: Quickstart — httpsession

Minimal working example: a Starlette app that counts visits per session,
then promotes the session to a known ID on login.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install httpsession httpx
"""
from __future__ import annotations

import asyncio

import httpx
from pydantic import BaseModel
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

import httpsession
from httpsession import MemoryStore, SessionMiddleware, SessionRegistry


class Visits(BaseModel):
    count: int = 0
    user: str | None = None


store = MemoryStore()
registry: SessionRegistry[Visits] = SessionRegistry(Visits, store=store)


async def home(request: Request) -> Response:
    registry.get(request).count += 1
    visits = registry.read(request)
    return PlainTextResponse(f"visit #{visits.count} (user={visits.user})")


async def login(request: Request) -> Response:
    # New ID on privilege change.
    registry.get(request).user = "alice"
    registry.renew(request)
    return PlainTextResponse("logged in")


async def logout(request: Request) -> Response:
    registry.delete(request)
    return PlainTextResponse("logged out")


app = Starlette(
    routes=[Route("/", home), Route("/login", login), Route("/logout", logout)],
    middleware=[Middleware(SessionMiddleware, registry=registry)],
    lifespan=registry.lifespan,
)


async def main() -> None:
    print(f"httpsession version: {httpsession.__version__}")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="https://example.test") as client:
        for path in ("/", "/", "/login", "/", "/logout", "/"):
            response = await client.get(path)
            print(f"GET {path:<8} -> {response.text:<28} sessions stored: {len(store)}")


if __name__ == "__main__":
    asyncio.run(main())
