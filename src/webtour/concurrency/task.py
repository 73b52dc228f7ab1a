"""Cancellable background computation.

A :class:`CancellableTask` runs one unit of work on a separate thread and
races it against a cancellation signal. Whichever happens first decides the
outcome:

- the work finishes: :class:`Completed` carrying its value or its error
- the signal fires: :class:`Cancelled`, returned without waiting further

Abandoned work keeps running until it returns (or notices the signal it was
given); a result produced after the signal fired is dropped.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from collections.abc import Callable
from concurrent.futures import Executor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from webtour.concurrency.cancellation import CancellationReason, CancellationSignal
from webtour.concurrency.handoff import HandoffSlot

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
ResultT = TypeVar("ResultT")


class TaskState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LaunchPolicy(str, Enum):
    """What :meth:`CancellableTask.run` does when the signal is already active."""

    SKIP = "skip"
    LAUNCH_AND_ABANDON = "launch_and_abandon"


class TaskCancelledError(Exception):
    def __init__(self, reason: CancellationReason | None) -> None:
        self.reason = reason
        label = reason.value if reason is not None else "unknown"
        super().__init__(f"Task cancelled ({label})")


@dataclass(frozen=True, slots=True)
class Completed(Generic[ResultT]):
    value: ResultT | None = None
    error: BaseException | None = None

    @property
    def state(self) -> TaskState:
        return TaskState.COMPLETED

    @property
    def failed(self) -> bool:
        return self.error is not None

    def unwrap(self) -> ResultT | None:
        if self.error is not None:
            raise self.error
        return self.value


@dataclass(frozen=True, slots=True)
class Cancelled:
    reason: CancellationReason | None = None

    @property
    def state(self) -> TaskState:
        return TaskState.CANCELLED

    def unwrap(self) -> Any:
        raise TaskCancelledError(self.reason)


Outcome = Completed[ResultT] | Cancelled


class CancellableTask(Generic[InputT, ResultT]):
    """Run ``work(value, signal)`` in the background, abandon it on cancellation.

    Args:
        work: The computation. It receives the caller's signal so it can stop
            early; nothing forces it to.
        name: Used for thread names and log context.
        executor: Optional pool to run the work on. Defaults to one daemon
            thread per invocation.
        launch_policy: Behaviour when the signal is already active at call time.
    """

    def __init__(
        self,
        work: Callable[[InputT, CancellationSignal], ResultT],
        *,
        name: str = "task",
        executor: Executor | None = None,
        launch_policy: LaunchPolicy = LaunchPolicy.SKIP,
    ) -> None:
        self._work = work
        self.name = name
        self._executor = executor
        self.launch_policy = launch_policy

    def run(self, value: InputT, signal: CancellationSignal) -> Outcome[ResultT]:
        slot: HandoffSlot[Completed[ResultT]] = HandoffSlot()

        if signal.cancelled:
            if self.launch_policy is LaunchPolicy.LAUNCH_AND_ABANDON:
                slot.claim()
                self._launch(value, signal, slot)
            logger.debug(
                "Signal already active at launch",
                extra={"task": self.name, "policy": self.launch_policy.value},
            )
            return Cancelled(reason=signal.reason)

        self._launch(value, signal, slot)

        remove_callback = signal.add_callback(slot.interrupt)
        try:
            slot.wait()
        finally:
            remove_callback()

        # A value put before this check was produced before the signal fired.
        delivered = None if signal.cancelled else slot.claim()
        if delivered is not None:
            return delivered
        slot.claim()

        logger.info(
            "Task abandoned",
            extra={"task": self.name, "reason": signal.reason.value if signal.reason else None},
        )
        return Cancelled(reason=signal.reason)

    async def run_async(self, value: InputT, signal: CancellationSignal) -> Outcome[ResultT]:
        """Event-loop variant of :meth:`run`; the caller coroutine suspends."""

        return await asyncio.to_thread(self.run, value, signal)

    def _launch(
        self,
        value: InputT,
        signal: CancellationSignal,
        slot: HandoffSlot[Completed[ResultT]],
    ) -> None:
        if self._executor is not None:
            self._executor.submit(self._deliver, value, signal, slot)
            return

        thread = threading.Thread(
            target=self._deliver,
            name=f"{self.name}-{uuid.uuid4().hex[:8]}",
            daemon=True,
            args=(value, signal, slot),
        )
        thread.start()

    def _deliver(
        self,
        value: InputT,
        signal: CancellationSignal,
        slot: HandoffSlot[Completed[ResultT]],
    ) -> None:
        try:
            result = self._work(value, signal)
        except BaseException as e:
            logger.warning("Task work failed", extra={"task": self.name, "error": repr(e)})
            self._hand_off(Completed(error=e), signal, slot)
            if not isinstance(e, Exception):
                raise
        else:
            self._hand_off(Completed(value=result), signal, slot)

    def _hand_off(
        self,
        outcome: Completed[ResultT],
        signal: CancellationSignal,
        slot: HandoffSlot[Completed[ResultT]],
    ) -> None:
        # Once the signal has fired nobody may receive this result.
        if signal.cancelled or not slot.put(outcome):
            logger.debug("Discarding late result", extra={"task": self.name})
