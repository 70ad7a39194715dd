"""Persistence component: PostgreSQL engine, sessions and repositories."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tether.config import Settings
from tether.domain.repository import IdentityRepository, LinkingEventRepository
from tether.persistence.database import create_engine, create_session_factory
from tether.persistence.repository import (
    PostgresIdentityRepository,
    PostgresLinkingEventRepository,
)
from tether.util.di.base import ProviderBase
from tether.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Postgres repositories sharing one session per request.

    The identity write and its audit events of a request commit together.
    """

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        engine = create_engine(settings)
        instrument_sqlalchemy(engine)
        try:
            yield engine
        finally:
            await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Commit when the request scope closes cleanly, roll back otherwise."""
        async with session_factory() as session:
            try:
                yield session
            except Exception as e:
                logfire.warn("Rolling back request session", error=str(e))
                await session.rollback()
                raise
            await session.commit()

    @provide(scope=Scope.REQUEST)
    def get_identity_repository(self, session: AsyncSession) -> IdentityRepository:
        return PostgresIdentityRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_linking_event_repository(
        self, session: AsyncSession
    ) -> LinkingEventRepository:
        return PostgresLinkingEventRepository(session)
