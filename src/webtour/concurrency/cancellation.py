"""Cooperative cancellation signals.

A signal only tells interested parties that a result is no longer wanted. It
never interrupts running code: work that wants to stop early has to poll
``cancelled`` or block on ``wait()``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class CancellationReason(str, Enum):
    REQUESTED = "requested"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    CLIENT_DISCONNECTED = "client_disconnected"


class CancellationSignal(Protocol):
    """Read-only view of a cancellation source."""

    @property
    def cancelled(self) -> bool: ...

    @property
    def reason(self) -> CancellationReason | None: ...

    def wait(self, timeout: float | None = None) -> bool: ...

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]: ...


class CancellationToken:
    """Thread-safe cancellation source.

    The first call to :meth:`cancel` wins; later calls (and their reasons) are
    ignored. Callbacks run exactly once, on the thread that cancels, or
    immediately on registration if the token is already cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: CancellationReason | None = None
        self._callbacks: list[Callable[[], None]] = []
        self._timer: threading.Timer | None = None

    @classmethod
    def with_timeout(cls, seconds: float) -> CancellationToken:
        """Create a token that cancels itself after ``seconds``.

        Call :meth:`close` once the token is no longer needed so the timer
        thread does not outlive its owner.
        """

        if seconds <= 0:
            raise ValueError("timeout must be positive")
        token = cls()
        timer = threading.Timer(seconds, token.cancel, args=(CancellationReason.DEADLINE_EXCEEDED,))
        timer.daemon = True
        token._timer = timer
        timer.start()
        return token

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> CancellationReason | None:
        return self._reason

    def cancel(self, reason: CancellationReason = CancellationReason.REQUESTED) -> bool:
        """Activate the signal. Returns False if it was already active."""

        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        logger.debug("Cancellation signalled", extra={"reason": reason.value})
        for callback in callbacks:
            callback()
        return True

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` to run on cancellation.

        Returns a function that unregisters the callback; calling it after the
        callback has fired is a no-op.
        """

        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._remove_callback(callback)

        callback()
        return lambda: None

    def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass
