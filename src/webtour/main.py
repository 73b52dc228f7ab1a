"""CLI entrypoint for webtour.

Commands:
- ``serve``: run the HTTP server under uvicorn
- ``race``: run one cancellable task invocation and print its outcome
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Callable

from pydantic import ValidationError

from webtour import __version__
from webtour.concurrency import (
    CancellableTask,
    Cancelled,
    CancellationSignal,
    CancellationToken,
    LaunchPolicy,
)
from webtour.logging import configure_logging
from webtour.server.config import ServerSettings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webtour",
        description="Web framework tour server with a cancellable parallel task",
    )
    parser.add_argument("--version", action="version", version=f"webtour {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None, help="Bind address (default: WEBTOUR_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: WEBTOUR_PORT)")

    race = subparsers.add_parser(
        "race",
        help="Race one background computation against a cancellation deadline",
    )
    race.add_argument(
        "--work-seconds",
        type=float,
        default=0.01,
        help="How long the work takes",
    )
    race.add_argument(
        "--cancel-after-seconds",
        type=float,
        default=0.05,
        help="When the cancellation signal fires (0 means it is already active)",
    )
    race.add_argument(
        "--fail",
        action="store_true",
        help="Make the work raise instead of returning a value",
    )
    race.add_argument(
        "--launch-policy",
        choices=[p.value for p in LaunchPolicy],
        default=LaunchPolicy.SKIP.value,
        help="What to do when the signal is already active at launch",
    )

    return parser


def _sleep_then_answer(
    work_seconds: float, fail: bool
) -> Callable[[str, CancellationSignal], str]:
    def work(value: str, signal: CancellationSignal) -> str:
        time.sleep(work_seconds)
        if fail:
            raise RuntimeError(f"work failed after {work_seconds}s")
        return value

    return work


def _race(args: argparse.Namespace) -> int:
    task: CancellableTask[str, str] = CancellableTask(
        _sleep_then_answer(args.work_seconds, args.fail),
        name="race",
        launch_policy=LaunchPolicy(args.launch_policy),
    )

    if args.cancel_after_seconds > 0:
        token = CancellationToken.with_timeout(args.cancel_after_seconds)
    else:
        token = CancellationToken()
        token.cancel()

    started = time.perf_counter()
    try:
        outcome = task.run("done", token)
    finally:
        token.close()
    elapsed_ms = (time.perf_counter() - started) * 1000

    if isinstance(outcome, Cancelled):
        reason = outcome.reason.value if outcome.reason else "unknown"
        print(f"cancelled ({reason}) after {elapsed_ms:.1f}ms")
    elif outcome.failed:
        print(f"completed with error after {elapsed_ms:.1f}ms: {outcome.error}")
    else:
        print(f"completed after {elapsed_ms:.1f}ms: {outcome.value}")
    return 0


def _serve(args: argparse.Namespace, settings: ServerSettings) -> int:
    import uvicorn

    from webtour.server.app import create_app

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Starting server", extra={"host": host, "port": port})
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ServerSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        if args.command == "serve":
            return _serve(args, settings)
        if args.command == "race":
            return _race(args)

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
