"""Unit tests for httpsession.session.handle.SessionHandle."""
from __future__ import annotations

from datetime import timedelta

import pytest
from conftest import START, Counter, FakeClock

from httpsession.session.handle import SessionDeletedError, SessionHandle, SessionNotActiveError
from httpsession.session.record import Record


@pytest.fixture()
def record() -> Record:
    return Record.create(START, timedelta(days=7), Counter(n=1), record_id="r1")


@pytest.fixture()
def handle(record: Record, clock: FakeClock) -> SessionHandle[Counter]:
    return SessionHandle(record, timedelta(days=7), clock)


class TestAccess:
    def test_get_marks_dirty(self, handle: SessionHandle[Counter], record: Record) -> None:
        handle.get().n += 1
        assert record.dirty is True
        assert record.session.n == 2

    def test_read_leaves_record_clean(self, handle: SessionHandle[Counter], record: Record) -> None:
        for _ in range(3):
            handle.read()
        assert record.dirty is False

    def test_read_returns_copy(self, handle: SessionHandle[Counter], record: Record) -> None:
        snapshot = handle.read()
        snapshot.n = 99
        assert record.session.n == 1

    def test_session_id(self, handle: SessionHandle[Counter]) -> None:
        assert handle.session_id == "r1"


class TestDelete:
    def test_delete_sets_flag(self, handle: SessionHandle[Counter], record: Record) -> None:
        handle.delete()
        assert record.deleted is True

    def test_delete_twice_is_harmless(self, handle: SessionHandle[Counter]) -> None:
        handle.delete()
        handle.delete()

    def test_get_after_delete_fails(self, handle: SessionHandle[Counter]) -> None:
        handle.delete()
        with pytest.raises(SessionDeletedError):
            handle.get()

    def test_read_after_delete_fails(self, handle: SessionHandle[Counter]) -> None:
        handle.delete()
        with pytest.raises(SessionDeletedError):
            handle.read()

    def test_renew_after_delete_fails(self, handle: SessionHandle[Counter]) -> None:
        handle.delete()
        with pytest.raises(SessionDeletedError):
            handle.renew()


class TestRenew:
    def test_renew_generates_new_id(self, handle: SessionHandle[Counter], record: Record) -> None:
        new_id = handle.renew()
        assert new_id != "r1"
        assert record.id == new_id
        assert record.replaced_ids == ["r1"]

    def test_renew_with_id(self, handle: SessionHandle[Counter], record: Record, clock: FakeClock) -> None:
        clock.advance(timedelta(hours=3))
        handle.renew_with_id("known")
        assert record.id == "known"
        assert record.absolute_deadline == clock.now + timedelta(days=7)
        assert record.dirty is True

    def test_renew_with_empty_id_rejected(self, handle: SessionHandle[Counter]) -> None:
        with pytest.raises(ValueError):
            handle.renew_with_id("")


class TestClosed:
    def test_closed_handle_fails_loudly(self, handle: SessionHandle[Counter]) -> None:
        handle.close()
        assert handle.closed is True
        with pytest.raises(SessionNotActiveError):
            handle.get()
        with pytest.raises(SessionNotActiveError):
            handle.delete()
        with pytest.raises(SessionNotActiveError):
            _ = handle.session_id
