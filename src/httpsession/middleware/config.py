"""Middleware configuration models.

Both models are frozen: a ``SessionRegistry`` reads its configuration once
at construction and it cannot change afterwards.

Classes
-------
- CookieSettings  — template for the emitted ``Set-Cookie`` header
- SessionConfig   — timeouts, cleanup interval and cookie template
"""
from __future__ import annotations

from datetime import timedelta
from http.cookies import SimpleCookie
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_EPOCH_EXPIRES = "Thu, 01 Jan 1970 00:00:00 GMT"


class CookieSettings(BaseModel):
    """Attributes shared by every session cookie the middleware emits.

    Parameters
    ----------
    name:
        Cookie name carrying the session ID.  Default: ``"SESSIONID"``.
    path:
        Cookie path.  Default: ``"/"``.
    domain:
        Cookie domain, or None to omit the attribute.
    http_only:
        Hide the cookie from client-side scripts.  Default: True.
    secure:
        Only send the cookie over HTTPS.  Default: True.
    same_site:
        ``"lax"`` (default), ``"strict"`` or ``"none"``.
    partitioned:
        Add the CHIPS ``Partitioned`` attribute.  Default: False.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="SESSIONID", min_length=1)
    path: str = "/"
    domain: str | None = None
    http_only: bool = True
    secure: bool = True
    same_site: Literal["lax", "strict", "none"] = "lax"
    partitioned: bool = False

    @model_validator(mode="after")
    def _same_site_none_needs_secure(self) -> CookieSettings:
        if self.same_site == "none" and not self.secure:
            raise ValueError("same_site='none' requires secure=True")
        return self

    def render(self, value: str, max_age: int) -> str:
        """Return a ``Set-Cookie`` header value.

        A negative ``max_age`` asks the client to drop the cookie at once;
        it is rendered as ``Max-Age=0`` with an expiry in 1970.
        """
        cookie: SimpleCookie = SimpleCookie()
        cookie[self.name] = value
        morsel = cookie[self.name]
        morsel["path"] = self.path
        if self.domain:
            morsel["domain"] = self.domain
        if max_age < 0:
            morsel["max-age"] = 0
            morsel["expires"] = _EPOCH_EXPIRES
        else:
            morsel["max-age"] = max_age
        if self.secure:
            morsel["secure"] = True
        if self.http_only:
            morsel["httponly"] = True
        morsel["samesite"] = self.same_site
        header = cookie.output(header="").strip()
        if self.partitioned:
            header += "; Partitioned"
        return header

    def expired(self) -> str:
        """Return a header value that erases the cookie on the client."""
        return self.render("", -1)


class SessionConfig(BaseModel):
    """Configuration for a ``SessionRegistry``.

    Parameters
    ----------
    idle_timeout:
        Inactivity period after which a session expires.  Default: 24 hours.
    absolute_timeout:
        Maximum lifetime of a session since creation or renewal,
        regardless of activity.  Default: 7 days.
    cleanup_interval:
        Period of the background purge of expired records, or None
        (default) to disable it.
    cookie:
        Template for the session cookie.
    """

    model_config = ConfigDict(frozen=True)

    idle_timeout: timedelta = timedelta(hours=24)
    absolute_timeout: timedelta = timedelta(days=7)
    cleanup_interval: timedelta | None = None
    cookie: CookieSettings = Field(default_factory=CookieSettings)

    @field_validator("idle_timeout", "absolute_timeout")
    @classmethod
    def _positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("timeouts must be positive")
        return value

    @field_validator("cleanup_interval")
    @classmethod
    def _positive_or_none(cls, value: timedelta | None) -> timedelta | None:
        if value is not None and value <= timedelta(0):
            raise ValueError("cleanup_interval must be positive or None")
        return value
