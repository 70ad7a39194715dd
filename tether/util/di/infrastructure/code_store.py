"""Ephemeral code store infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from redis.asyncio import Redis

from tether.config import Settings
from tether.domain.repository import EphemeralCodeStore
from tether.persistence.code_store import InMemoryCodeStore, RedisCodeStore
from tether.util.clock import Clock
from tether.util.di.base import ProviderBase
from tether.util.observability import instrument_redis


class CodeStoreProvider(ProviderBase):
    """Code store component base."""

    __mock_component__ = "code_store"


class ProdCodeStoreProvider(CodeStoreProvider):
    """Production code store provider.

    Uses Redis unless the in-process backend is configured. One store is
    shared by all requests; both coordinators depend on it.
    """

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_code_store(
        self, settings: Settings, clock: Clock
    ) -> AsyncIterator[EphemeralCodeStore]:
        """Provide the configured code store."""
        config = settings.code_store
        if config.backend == "memory":
            logfire.warn(
                "Using in-process code store; codes are not shared between workers"
            )
            yield InMemoryCodeStore(clock)
            return

        instrument_redis()
        client = Redis.from_url(config.redis_url, decode_responses=True)
        try:
            yield RedisCodeStore(client, key_prefix=config.key_prefix)
        finally:
            await client.aclose()
