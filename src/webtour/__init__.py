"""webtour.

A FastAPI service that tours routing, binding, validation, cookies and
middleware, plus a single-slot cancellable background task:

- configuration loaded from `.env`
- structured JSON logging
- `webtour serve` / `webtour race` CLI
"""

__version__ = "0.1.0"

from webtour.concurrency import CancellableTask, CancellationToken

__all__ = ["__version__", "CancellableTask", "CancellationToken"]
