"""Stdlib logging setup.

Route modules log with ``logging.getLogger(__name__)``. Records go to
stdout and are forwarded to Logfire, so they appear inside the request
span that emitted them.
"""

import logging
import sys

import logfire

from tether.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that log each request or command at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "redis", "asyncio")


def level_for(settings: Settings) -> int:
    if settings.debug:
        return logging.DEBUG
    if settings.environment == "production":
        return logging.WARNING
    return logging.INFO


def setup_logging(settings: Settings) -> None:
    """Replace any existing root configuration. Call once at startup."""
    level = level_for(settings)
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logging.basicConfig(
        level=level,
        handlers=[console, logfire.LogfireLoggingHandler()],
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: environment=%s level=%s",
        settings.environment,
        logging.getLevelName(level),
    )
