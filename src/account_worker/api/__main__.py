"""
account_worker.api.__main__

Entrypoint for running the worker via `python -m account_worker.api`.

Responsibilities:
- Load settings.
- Create the app (which owns the dispatcher task).
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from account_worker.api.app import create_app
from account_worker.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# Scale out by running more processes against the same request queue.
