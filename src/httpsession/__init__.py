"""httpsession — cookie-based HTTP sessions for ASGI applications.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> from pydantic import BaseModel
>>> from httpsession import SessionRegistry
>>> class Counter(BaseModel):
...     n: int = 0
>>> registry = SessionRegistry(Counter)
>>> registry.config.cookie.name
'SESSIONID'
"""
from __future__ import annotations

# Session core
from httpsession.session.codec import Codec, CodecError, JSONCodec, YAMLCodec
from httpsession.session.handle import SessionDeletedError, SessionHandle, SessionNotActiveError
from httpsession.session.record import Record, new_session_id

# Stores
from httpsession.storage.base import SessionStore
from httpsession.storage.memory import MemoryStore
from httpsession.storage.sqlite import SQLiteStore

# Middleware
from httpsession.middleware.cleanup import CleanupTask
from httpsession.middleware.config import CookieSettings, SessionConfig
from httpsession.middleware.guard import ActiveSessionGuard, ConcurrentSessionConflict
from httpsession.middleware.interceptor import ResponseInterceptor
from httpsession.middleware.registry import (
    SessionMiddleware,
    SessionRegistry,
    default_error_handler,
)

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Session core
    "Codec",
    "CodecError",
    "JSONCodec",
    "Record",
    "SessionDeletedError",
    "SessionHandle",
    "SessionNotActiveError",
    "YAMLCodec",
    "new_session_id",
    # Stores
    "MemoryStore",
    "SQLiteStore",
    "SessionStore",
    # Middleware
    "ActiveSessionGuard",
    "CleanupTask",
    "ConcurrentSessionConflict",
    "CookieSettings",
    "ResponseInterceptor",
    "SessionConfig",
    "SessionMiddleware",
    "SessionRegistry",
    "default_error_handler",
]
