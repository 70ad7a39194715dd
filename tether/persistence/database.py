"""PostgreSQL engine, sessions and outage translation."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tether.config import Settings
from tether.domain.error import RepositoryUnavailableError

# Shows up in pg_stat_activity
APPLICATION_NAME = "tether-api"


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the asyncpg engine; SQL is echoed in debug mode."""
    database = settings.database
    return create_async_engine(
        database.url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=database.pool_size,
        max_overflow=database.max_overflow,
        connect_args={"server_settings": {"application_name": APPLICATION_NAME}},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Repositories map rows to frozen models, so nothing needs refreshing
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@contextmanager
def translate_outages() -> Iterator[None]:
    """Re-raise connection-level failures as RepositoryUnavailableError.

    Constraint violations and programming errors pass through unchanged.
    """
    try:
        yield
    except (OperationalError, InterfaceError, OSError) as e:
        raise RepositoryUnavailableError(f"Database unavailable: {e}") from e
