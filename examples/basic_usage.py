#!/usr/bin/env python3
"""Programmatic CancellableTask example.

Races a slow computation against a deadline twice:

* once with a deadline the work beats (Completed)
* once with a deadline that fires first (Cancelled, returned at the deadline)
"""

from __future__ import annotations

import argparse
import time
from collections.abc import Callable, Sequence

from webtour.concurrency import CancellableTask, CancellationSignal, CancellationToken
from webtour.logging import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Race a computation against a deadline.")
    parser.add_argument("--work-seconds", type=float, default=0.2, help="Duration of the work")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)


def make_slow_square(work_seconds: float) -> Callable[[int, CancellationSignal], int]:
    def slow_square(value: int, signal: CancellationSignal) -> int:
        # Stop early if nobody is waiting any more.
        if signal.wait(work_seconds):
            return -1
        return value * value

    return slow_square


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    task = CancellableTask(make_slow_square(args.work_seconds), name="square")

    for deadline in (args.work_seconds * 4, args.work_seconds / 4):
        token = CancellationToken.with_timeout(deadline)
        started = time.perf_counter()
        try:
            outcome = task.run(12, token)
        finally:
            token.close()
        elapsed = time.perf_counter() - started
        print(f"deadline={deadline:.3f}s elapsed={elapsed:.3f}s outcome={outcome}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
