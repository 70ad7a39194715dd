"""Redis-backed ephemeral code store.

Each entry is a hash with ``value`` and ``claimed`` fields and a native key
TTL. Claim, swap and put-if-absent run as Lua scripts so each is a single
atomic step on the server.
"""

from datetime import timedelta

import logfire
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from tether.domain.error import RepositoryUnavailableError
from tether.domain.repository.code_store import EphemeralCodeStore, StoredCode

# KEYS[1] key; ARGV[1] value; ARGV[2] ttl in ms, 0 for none; ARGV[3] "1" if only absent
_PUT = """
if ARGV[3] == '1' and redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('DEL', KEYS[1])
redis.call('HSET', KEYS[1], 'value', ARGV[1], 'claimed', '0')
if tonumber(ARGV[2]) > 0 then
    redis.call('PEXPIRE', KEYS[1], ARGV[2])
end
return 1
"""

_CLAIM = """
local entry = redis.call('HMGET', KEYS[1], 'value', 'claimed')
if not entry[1] or entry[2] == '1' then
    return false
end
redis.call('HSET', KEYS[1], 'claimed', '1')
return entry[1]
"""

# KEYS[1] key; ARGV[1] value; ARGV[2] ttl in ms; ARGV[3] prefixed retire key prefix or ""
_SWAP = """
local previous = redis.call('HGET', KEYS[1], 'value')
redis.call('DEL', KEYS[1])
redis.call('HSET', KEYS[1], 'value', ARGV[1], 'claimed', '0')
if tonumber(ARGV[2]) > 0 then
    redis.call('PEXPIRE', KEYS[1], ARGV[2])
end
if previous and ARGV[3] ~= '' and previous ~= ARGV[1] then
    local retired = ARGV[3] .. previous
    if redis.call('HGET', retired, 'claimed') == '0' then
        redis.call('DEL', retired)
    end
end
return previous
"""


def _ttl_ms(ttl: timedelta | None) -> int:
    if ttl is None:
        return 0
    return max(1, int(ttl.total_seconds() * 1000))


class RedisCodeStore(EphemeralCodeStore):
    """Code store shared by all API workers."""

    def __init__(self, client: Redis, key_prefix: str) -> None:
        """Initialize store.

        Args:
            client: Redis client created with ``decode_responses=True``
            key_prefix: Namespace prepended to every key
        """
        self.client = client
        self.key_prefix = key_prefix
        self._put = client.register_script(_PUT)
        self._claim = client.register_script(_CLAIM)
        self._swap = client.register_script(_SWAP)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def put(
        self,
        key: str,
        value: str,
        ttl: timedelta | None,
        *,
        only_if_absent: bool = False,
    ) -> bool:
        try:
            stored = await self._put(
                keys=[self._key(key)],
                args=[value, _ttl_ms(ttl), "1" if only_if_absent else "0"],
            )
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise _unavailable(e) from e
        return bool(stored)

    async def get(self, key: str) -> StoredCode | None:
        try:
            value, claimed = await self.client.hmget(self._key(key), "value", "claimed")
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise _unavailable(e) from e
        if value is None:
            return None
        return StoredCode(value=value, claimed=claimed == "1")

    async def claim(self, key: str) -> str | None:
        try:
            return await self._claim(keys=[self._key(key)])
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise _unavailable(e) from e

    async def swap(
        self,
        key: str,
        value: str,
        ttl: timedelta | None,
        *,
        retire_prefix: str | None = None,
    ) -> str | None:
        # The retired key is derived inside the script, so this needs a
        # single Redis node rather than a cluster
        retire = self._key(retire_prefix) if retire_prefix is not None else ""
        try:
            return await self._swap(
                keys=[self._key(key)], args=[value, _ttl_ms(ttl), retire]
            )
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise _unavailable(e) from e

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self.client.delete(*(self._key(k) for k in keys))
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise _unavailable(e) from e

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except (RedisConnectionError, RedisTimeoutError) as e:
            logfire.warn("Redis ping failed", error=str(e))
            return False


def _unavailable(error: Exception) -> RepositoryUnavailableError:
    logfire.error("Redis code store unreachable", error=str(error))
    return RepositoryUnavailableError(f"Code store unavailable: {error}")
