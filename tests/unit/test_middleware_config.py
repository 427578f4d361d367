"""Unit tests for httpsession.middleware.config."""
from __future__ import annotations

from datetime import timedelta
from http.cookies import SimpleCookie

import pytest
from pydantic import ValidationError

from httpsession.middleware.config import CookieSettings, SessionConfig


def parse(header: str, name: str = "SESSIONID"):
    jar: SimpleCookie = SimpleCookie()
    jar.load(header)
    return jar[name]


class TestSessionConfig:
    def test_defaults(self) -> None:
        config = SessionConfig()
        assert config.idle_timeout == timedelta(hours=24)
        assert config.absolute_timeout == timedelta(days=7)
        assert config.cleanup_interval is None
        assert config.cookie == CookieSettings()

    def test_frozen(self) -> None:
        config = SessionConfig()
        with pytest.raises(ValidationError):
            config.idle_timeout = timedelta(seconds=1)  # type: ignore[misc]

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SessionConfig(idle_timeout=timedelta(0))
        with pytest.raises(ValidationError):
            SessionConfig(absolute_timeout=timedelta(seconds=-1))

    def test_non_positive_cleanup_interval_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SessionConfig(cleanup_interval=timedelta(0))

    def test_timeouts_accept_seconds(self) -> None:
        assert SessionConfig(idle_timeout=60).idle_timeout == timedelta(minutes=1)


class TestCookieSettings:
    def test_defaults(self) -> None:
        cookie = CookieSettings()
        assert cookie.name == "SESSIONID"
        assert cookie.http_only is True
        assert cookie.secure is True
        assert cookie.same_site == "lax"

    def test_render(self) -> None:
        morsel = parse(CookieSettings().render("abc", 3600))
        assert morsel.value == "abc"
        assert morsel["max-age"] == "3600"
        assert morsel["path"] == "/"
        assert morsel["httponly"] is True
        assert morsel["secure"] is True
        assert morsel["samesite"].lower() == "lax"

    def test_render_domain(self) -> None:
        header = CookieSettings(domain="example.com").render("abc", 10)
        assert parse(header)["domain"] == "example.com"

    def test_render_insecure(self) -> None:
        header = CookieSettings(secure=False, http_only=False).render("abc", 10)
        assert "Secure" not in header
        assert "HttpOnly" not in header

    def test_expired(self) -> None:
        header = CookieSettings().expired()
        morsel = parse(header)
        assert morsel.value == ""
        assert morsel["max-age"] == "0"
        assert "1970" in morsel["expires"]

    def test_partitioned(self) -> None:
        assert CookieSettings(partitioned=True).render("abc", 10).endswith("; Partitioned")

    def test_same_site_none_requires_secure(self) -> None:
        with pytest.raises(ValidationError):
            CookieSettings(same_site="none", secure=False)

    def test_custom_name(self) -> None:
        header = CookieSettings(name="sid").render("v", 5)
        assert parse(header, "sid").value == "v"
