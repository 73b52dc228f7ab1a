"""Unit tests for the cancellation token."""

from __future__ import annotations

import threading

import pytest

from webtour.concurrency import CancellationReason, CancellationToken


def test_first_cancel_wins() -> None:
    token = CancellationToken()
    assert token.cancelled is False
    assert token.reason is None

    assert token.cancel(CancellationReason.CLIENT_DISCONNECTED) is True
    assert token.cancel(CancellationReason.DEADLINE_EXCEEDED) is False

    assert token.cancelled is True
    assert token.reason is CancellationReason.CLIENT_DISCONNECTED


def test_callbacks_run_once_on_cancel() -> None:
    token = CancellationToken()
    calls: list[str] = []
    token.add_callback(lambda: calls.append("a"))

    token.cancel()
    token.cancel()

    assert calls == ["a"]


def test_callback_added_after_cancel_runs_immediately() -> None:
    token = CancellationToken()
    token.cancel()
    calls: list[str] = []

    remove = token.add_callback(lambda: calls.append("late"))
    remove()

    assert calls == ["late"]


def test_removed_callback_does_not_run() -> None:
    token = CancellationToken()
    calls: list[str] = []
    remove = token.add_callback(lambda: calls.append("x"))

    remove()
    remove()
    token.cancel()

    assert calls == []


def test_with_timeout_fires_deadline() -> None:
    token = CancellationToken.with_timeout(0.02)
    try:
        assert token.wait(2.0) is True
        assert token.reason is CancellationReason.DEADLINE_EXCEEDED
    finally:
        token.close()


def test_close_stops_deadline_timer() -> None:
    token = CancellationToken.with_timeout(0.05)
    token.close()
    assert token.wait(0.2) is False
    assert token.cancelled is False


def test_with_timeout_rejects_non_positive() -> None:
    with pytest.raises(ValueError):
        CancellationToken.with_timeout(0)


def test_wait_unblocks_other_thread() -> None:
    token = CancellationToken()
    seen = threading.Event()

    def waiter() -> None:
        if token.wait(2.0):
            seen.set()

    thread = threading.Thread(target=waiter)
    thread.start()
    token.cancel()
    thread.join(2.0)

    assert seen.is_set()
