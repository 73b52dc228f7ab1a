"""Root-level middleware and request-scoped capabilities.

Order (outermost first) as installed by :func:`install_middleware`:

1. ``RecoverMiddleware``: turns any unhandled exception into a 500
2. ``RequestLoggerMiddleware``: one structured log line per request
3. ``CapabilitiesMiddleware``: attaches :class:`RequestCapabilities`
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field

from fastapi import FastAPI, HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from webtour.server.errors import render_error

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class RequestCapabilities:
    """Extra behaviour attached to one request without subclassing it."""

    request_id: str
    calls: list[str] = field(default_factory=list)

    def foo(self) -> None:
        self.calls.append("foo")
        logger.info("foo", extra={"request_id": self.request_id})

    def bar(self) -> None:
        self.calls.append("bar")
        logger.info("bar", extra={"request_id": self.request_id})


def get_capabilities(request: Request) -> RequestCapabilities:
    """Typed lookup of the capabilities attached by the middleware."""

    capabilities = getattr(request.state, "capabilities", None)
    if not isinstance(capabilities, RequestCapabilities):
        raise HTTPException(status_code=500, detail="Request capabilities not configured")
    return capabilities


class CapabilitiesMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.capabilities = RequestCapabilities(request_id=request_id)
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": round((time.perf_counter() - started) * 1000, 3),
                "remote_ip": request.client.host if request.client else None,
                "request_id": response.headers.get(REQUEST_ID_HEADER),
            },
        )
        return response


class RecoverMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "Recovered from unhandled error",
                extra={"method": request.method, "path": request.url.path},
            )
            return render_error(request, 500, "Internal Server Error")


def install_middleware(app: FastAPI) -> None:
    # add_middleware prepends, so the last one added is the outermost.
    app.add_middleware(CapabilitiesMiddleware)
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(RecoverMiddleware)
