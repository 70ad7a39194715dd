#!/usr/bin/env python3
"""Serve the API with uvicorn.

Logging and Logfire are configured before the app factory runs so that
startup failures are reported too.
"""

import sys

import logfire
import uvicorn

from tether.config import Settings
from tether.util.logging import setup_logging
from tether.util.observability import configure_logfire

APP_FACTORY = "tether.interface.api.app:create_app"


def main() -> int:
    settings = Settings()
    setup_logging(settings)
    configure_logfire(settings)

    logfire.info(
        "Starting Tether API",
        environment=settings.environment,
        code_store=settings.code_store.backend,
        git_sha=settings.git_sha,
    )
    try:
        uvicorn.run(
            APP_FACTORY,
            factory=True,
            host="0.0.0.0",
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )
    except Exception:
        logfire.exception("Application startup failed")
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
