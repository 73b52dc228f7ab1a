"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from webtour.server.app import create_app
from webtour.server.config import ServerSettings


@pytest.fixture
def settings(tmp_path: Path) -> ServerSettings:
    """Provide server settings rooted in a temporary directory."""
    return ServerSettings(
        _env_file=None,
        assets_dir=tmp_path / "assets",
        public_dir=tmp_path / "public",
        upload_dir=tmp_path / "uploads",
        error_pages_dir=tmp_path / "errors",
        admin_username="joe",
        admin_password="secret",
    )


@pytest.fixture
def client(settings: ServerSettings) -> Iterator[TestClient]:
    """Provide a test client over a freshly built app."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
