"""FastAPI app factory.

The app is built from an explicit :class:`ServerSettings`; there is no
module-level application object.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from webtour import __version__
from webtour.server.config import ServerSettings
from webtour.server.errors import install_error_handlers
from webtour.server.middleware import install_middleware
from webtour.server.routes import router

logger = logging.getLogger(__name__)


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    settings = settings or ServerSettings()

    app = FastAPI(
        title="webtour",
        version=__version__,
        description="A tour of web framework features around a cancellable background task.",
    )

    # Handlers read this through routes._settings().
    app.state.settings = settings

    install_error_handlers(app)
    install_middleware(app)
    app.include_router(router)
    _maybe_mount_static(app, settings)

    logger.info(
        "App created",
        extra={
            "parallel_timeout_seconds": settings.parallel_timeout_seconds,
            "assets_dir": str(settings.assets_dir),
        },
    )
    return app


def _maybe_mount_static(app: FastAPI, settings: ServerSettings) -> None:
    """Serve the assets directory under `/static` when it exists."""

    if settings.assets_dir.is_dir():
        app.mount("/static", StaticFiles(directory=settings.assets_dir), name="static")
    else:
        logger.info("Static assets not mounted", extra={"assets_dir": str(settings.assets_dir)})
