"""Session record, payload codecs, and the request-scoped handle.

Public surface
--------------
- Record                 — persisted session state plus transient flags
- Codec                  — abstract payload codec
- JSONCodec / YAMLCodec  — pydantic-backed codecs
- CodecError             — raised on encode/decode failure
- SessionHandle          — per-request get / read / delete / renew
- SessionNotActiveError  — session used outside a wrapped request
- SessionDeletedError    — session used after deletion
"""
from __future__ import annotations

from httpsession.session.codec import Codec, CodecError, JSONCodec, YAMLCodec
from httpsession.session.handle import SessionDeletedError, SessionHandle, SessionNotActiveError
from httpsession.session.record import Record, new_session_id, utcnow

__all__ = [
    "Codec",
    "CodecError",
    "JSONCodec",
    "Record",
    "SessionDeletedError",
    "SessionHandle",
    "SessionNotActiveError",
    "YAMLCodec",
    "new_session_id",
    "utcnow",
]
