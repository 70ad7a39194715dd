#!/usr/bin/env python3
"""Apply alembic migrations before the app starts.

Usage: run_migrations.py [REVISION]   (defaults to head)
"""

import sys

import logfire
from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory

from tether.config import Settings
from tether.util.observability import configure_logfire


def main(argv: list[str]) -> int:
    settings = Settings()
    configure_logfire(settings)

    revision = argv[1] if len(argv) > 1 else "head"
    config = Config("alembic.ini")
    heads = ScriptDirectory.from_config(config).get_heads()

    with logfire.span("migrations.upgrade", revision=revision, heads=heads):
        try:
            command.upgrade(config, revision)
        except Exception:
            # Non-zero exit keeps the deploy from starting on a broken schema
            logfire.exception("Database migration failed", revision=revision)
            raise
        logfire.info("Database migrations applied", revision=revision)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
