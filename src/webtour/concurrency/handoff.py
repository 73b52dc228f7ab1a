"""Single-capacity hand-off between one producer and one consumer."""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class HandoffSlot(Generic[T]):
    """A slot that holds at most one value.

    The producer calls :meth:`put` once. The consumer blocks in :meth:`wait`
    until the slot is filled or :meth:`interrupt` is called, then calls
    :meth:`claim`, which either takes the value or closes the slot. A put on a
    full or closed slot is absorbed: it returns False and never blocks.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._value: T | None = None
        self._filled = False
        self._closed = False
        self._interrupted = False

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, value: T) -> bool:
        with self._cond:
            if self._filled or self._closed:
                return False
            self._value = value
            self._filled = True
            self._cond.notify_all()
            return True

    def interrupt(self) -> None:
        """Wake the consumer without delivering a value."""

        with self._cond:
            self._interrupted = True
            self._cond.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until filled or interrupted. Returns False on timeout."""

        with self._cond:
            return self._cond.wait_for(lambda: self._filled or self._interrupted, timeout)

    def claim(self) -> T | None:
        """Take the pending value, or close the slot if there is none.

        Returns None when the slot was closed; no value can be delivered after
        that.
        """

        with self._cond:
            if self._filled:
                value, self._value = self._value, None
                self._closed = True
                return value
            self._closed = True
            return None
