"""FastAPI server adapter for webtour.

Design intent:
- Keep the cancellable task in `webtour.concurrency`
- Keep HTTP concerns (routing, binding, middleware, error pages) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from webtour.server.app import create_app
