"""HTTP error handling.

All errors funnel through :func:`render_error`: it serves ``<code>.html`` from
the configured error-pages directory when such a file exists and falls back
to a JSON ``{"detail": ...}`` body otherwise.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

logger = logging.getLogger(__name__)


def render_error(
    request: Request,
    status_code: int,
    detail: Any,
    headers: dict[str, str] | None = None,
) -> Response:
    settings = getattr(request.app.state, "settings", None)
    if settings is not None:
        page = settings.error_pages_dir / f"{status_code}.html"
        if page.is_file():
            return FileResponse(page, status_code=status_code, headers=headers)
        logger.debug("No error page", extra={"path": str(page)})

    return JSONResponse({"detail": detail}, status_code=status_code, headers=headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    logger.error(
        "HTTP error",
        extra={"status": exc.status_code, "detail": exc.detail, "path": request.url.path},
    )
    return render_error(request, exc.status_code, exc.detail, headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    messages = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{loc}: {error.get('msg', 'invalid')}")
    detail = "; ".join(messages) or "bad request"
    logger.error("Binding failed", extra={"detail": detail, "path": request.url.path})
    return render_error(request, 400, detail)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
