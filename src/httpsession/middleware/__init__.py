"""Middleware subpackage: the session registry and its collaborators.

Public surface
--------------
- SessionRegistry            — resolves, guards and commits sessions
- SessionMiddleware          — ASGI entry point
- SessionConfig              — timeouts, cleanup interval, cookie template
- CookieSettings             — session cookie attributes
- ResponseInterceptor        — commit-on-first-write ``send`` wrapper
- ActiveSessionGuard         — one in-flight request per session ID
- ConcurrentSessionConflict  — raised when that rule is violated
- CleanupTask                — periodic ``delete_expired``
"""
from __future__ import annotations

from httpsession.middleware.cleanup import CleanupTask
from httpsession.middleware.config import CookieSettings, SessionConfig
from httpsession.middleware.guard import ActiveSessionGuard, ConcurrentSessionConflict
from httpsession.middleware.interceptor import ResponseInterceptor
from httpsession.middleware.registry import (
    SessionMiddleware,
    SessionRegistry,
    cookies_named,
    default_error_handler,
)

__all__ = [
    "ActiveSessionGuard",
    "CleanupTask",
    "ConcurrentSessionConflict",
    "CookieSettings",
    "ResponseInterceptor",
    "SessionConfig",
    "SessionMiddleware",
    "SessionRegistry",
    "cookies_named",
    "default_error_handler",
]
