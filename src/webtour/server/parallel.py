"""Ties a :class:`CancellableTask` to the lifetime of one HTTP request."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from fastapi import Request

from webtour.concurrency import (
    CancellableTask,
    CancellationReason,
    CancellationSignal,
    CancellationToken,
)

logger = logging.getLogger(__name__)

GREETING = "Hay!"


def make_greeting_task(work_seconds: float) -> CancellableTask[str, str]:
    """The background work behind ``/parallel_context``.

    It logs the request method and answers with a fixed greeting. With
    ``work_seconds`` > 0 it first waits that long on the request's signal,
    returning early (and uselessly) if the request is abandoned.
    """

    def greet(method: str, signal: CancellationSignal) -> str:
        logger.info("Method: %s", method)
        if work_seconds > 0 and signal.wait(work_seconds):
            logger.info("Greeting work noticed cancellation", extra={"method": method})
        return GREETING

    return CancellableTask(greet, name="parallel-context")


async def _watch_disconnect(
    request: Request, token: CancellationToken, poll_seconds: float
) -> None:
    while not token.cancelled:
        if await request.is_disconnected():
            token.cancel(CancellationReason.CLIENT_DISCONNECTED)
            return
        await asyncio.sleep(poll_seconds)


@contextlib.asynccontextmanager
async def request_cancellation(
    request: Request,
    *,
    timeout_seconds: float = 0.0,
    poll_seconds: float = 0.05,
) -> AsyncIterator[CancellationToken]:
    """Yield a token that fires when the client goes away or the deadline passes.

    The token is cancelled on exit as well, so background work that observes
    it stops once the request is finished.
    """

    token = (
        CancellationToken.with_timeout(timeout_seconds)
        if timeout_seconds > 0
        else CancellationToken()
    )
    watcher = asyncio.create_task(_watch_disconnect(request, token, poll_seconds))
    try:
        yield token
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
        token.cancel(CancellationReason.REQUESTED)
        token.close()
