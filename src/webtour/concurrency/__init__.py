"""Cooperative cancellation and the single-slot cancellable task.

Nothing in this package depends on the web layer; the HTTP handlers only hand
it an input value and a signal tied to the request.
"""

from webtour.concurrency.cancellation import (
    CancellationReason,
    CancellationSignal,
    CancellationToken,
)
from webtour.concurrency.handoff import HandoffSlot
from webtour.concurrency.task import (
    CancellableTask,
    Cancelled,
    Completed,
    LaunchPolicy,
    Outcome,
    TaskCancelledError,
    TaskState,
)

__all__ = [
    "CancellableTask",
    "Cancelled",
    "CancellationReason",
    "CancellationSignal",
    "CancellationToken",
    "Completed",
    "HandoffSlot",
    "LaunchPolicy",
    "Outcome",
    "TaskCancelledError",
    "TaskState",
]
