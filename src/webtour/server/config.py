"""Configuration for the tour server.

Loaded from environment variables and a local `.env` file. Tests can pass
`ServerSettings(_env_file=path)` or build the settings directly and hand them
to :func:`webtour.server.app.create_app`.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Settings for the HTTP server and the parallel-context task.

    Environment variables:
    - WEBTOUR_HOST / WEBTOUR_PORT
    - LOG_LEVEL
    - WEBTOUR_ADMIN_USERNAME / WEBTOUR_ADMIN_PASSWORD
    - WEBTOUR_PARALLEL_TIMEOUT_SECONDS (and the other fields below)
    """

    host: str = Field(default="127.0.0.1", validation_alias="WEBTOUR_HOST")
    port: int = Field(default=1323, ge=1, le=65535, validation_alias="WEBTOUR_PORT")

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    assets_dir: Path = Field(
        default=Path("assets"),
        validation_alias="WEBTOUR_ASSETS_DIR",
        description="Directory served under /static (mounted only if it exists)",
    )
    public_dir: Path = Field(
        default=Path("public"),
        validation_alias="WEBTOUR_PUBLIC_DIR",
        description="Directory holding index.html, served at /",
    )
    upload_dir: Path = Field(
        default=Path("uploads"),
        validation_alias="WEBTOUR_UPLOAD_DIR",
        description="Where files posted to /save are written",
    )
    error_pages_dir: Path = Field(
        default=Path("."),
        validation_alias="WEBTOUR_ERROR_PAGES_DIR",
        description="Directory searched for <status>.html error pages",
    )

    admin_username: str = Field(default="joe", validation_alias="WEBTOUR_ADMIN_USERNAME")
    admin_password: str = Field(default="secret", validation_alias="WEBTOUR_ADMIN_PASSWORD")

    cookie_ttl_hours: float = Field(
        default=24.0,
        gt=0,
        validation_alias="WEBTOUR_COOKIE_TTL_HOURS",
    )
    search_default_length: int = Field(
        default=50,
        ge=0,
        validation_alias="WEBTOUR_SEARCH_DEFAULT_LENGTH",
    )

    parallel_timeout_seconds: float = Field(
        default=0.0,
        ge=0,
        validation_alias="WEBTOUR_PARALLEL_TIMEOUT_SECONDS",
        description="Hard deadline for /parallel_context (0 disables it).",
    )
    parallel_work_seconds: float = Field(
        default=0.0,
        ge=0,
        validation_alias="WEBTOUR_PARALLEL_WORK_SECONDS",
        description=(
            "Simulated duration of the /parallel_context work. The work waits on the "
            "request's cancellation signal, so an abandoned request stops it early."
        ),
    )
    disconnect_poll_seconds: float = Field(
        default=0.05,
        gt=0,
        validation_alias="WEBTOUR_DISCONNECT_POLL_SECONDS",
        description="How often a running request checks whether its client went away.",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _require_admin_password(self) -> ServerSettings:
        if not self.admin_password:
            raise ValueError("WEBTOUR_ADMIN_PASSWORD must not be empty")
        return self

    @property
    def index_file(self) -> Path:
        return self.public_dir / "index.html"
