"""Unit tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from webtour.server.config import ServerSettings

_ENV_VARS = (
    "WEBTOUR_HOST",
    "WEBTOUR_PORT",
    "LOG_LEVEL",
    "WEBTOUR_ADMIN_PASSWORD",
    "WEBTOUR_PARALLEL_TIMEOUT_SECONDS",
    "WEBTOUR_PUBLIC_DIR",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_settings_defaults() -> None:
    settings = ServerSettings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 1323
    assert settings.admin_username == "joe"
    assert settings.cookie_ttl_hours == 24.0
    assert settings.search_default_length == 50
    assert settings.parallel_timeout_seconds == 0.0
    assert settings.index_file == Path("public") / "index.html"


def test_settings_loads_from_dotenv(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "\n".join(
            [
                "WEBTOUR_PORT=8080",
                "LOG_LEVEL=DEBUG",
                "WEBTOUR_PARALLEL_TIMEOUT_SECONDS=1.5",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = ServerSettings()

    assert settings.port == 8080
    assert settings.log_level == "DEBUG"
    assert settings.parallel_timeout_seconds == 1.5


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEBTOUR_PUBLIC_DIR", "site")
    assert ServerSettings().index_file == Path("site") / "index.html"


def test_empty_admin_password_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEBTOUR_ADMIN_PASSWORD", "")
    with pytest.raises(ValidationError):
        ServerSettings()


def test_negative_timeout_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEBTOUR_PARALLEL_TIMEOUT_SECONDS", "-1")
    with pytest.raises(ValidationError):
        ServerSettings()
