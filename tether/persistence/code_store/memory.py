"""In-process ephemeral code store.

Suitable for tests and single-process deployments only: codes issued by one
worker are invisible to the others.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import threading

from tether.domain.repository.code_store import EphemeralCodeStore, StoredCode
from tether.util.clock import Clock


@dataclass
class _Entry:
    value: str
    claimed: bool
    expires_at: datetime | None


class InMemoryCodeStore(EphemeralCodeStore):
    """Dict-backed code store with lazy expiry.

    Every operation runs under one lock, which makes ``claim`` and ``swap``
    atomic across threads as well as coroutines.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _live(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock.now():
            del self._entries[key]
            return None
        return entry

    def _expiry(self, ttl: timedelta | None) -> datetime | None:
        return None if ttl is None else self._clock.now() + ttl

    async def put(
        self,
        key: str,
        value: str,
        ttl: timedelta | None,
        *,
        only_if_absent: bool = False,
    ) -> bool:
        with self._lock:
            if only_if_absent and self._live(key) is not None:
                return False
            self._entries[key] = _Entry(value, False, self._expiry(ttl))
            return True

    async def get(self, key: str) -> StoredCode | None:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                return None
            return StoredCode(value=entry.value, claimed=entry.claimed)

    async def claim(self, key: str) -> str | None:
        with self._lock:
            entry = self._live(key)
            if entry is None or entry.claimed:
                return None
            entry.claimed = True
            return entry.value

    async def swap(
        self,
        key: str,
        value: str,
        ttl: timedelta | None,
        *,
        retire_prefix: str | None = None,
    ) -> str | None:
        with self._lock:
            previous = self._live(key)
            self._entries[key] = _Entry(value, False, self._expiry(ttl))
            if previous is None:
                return None
            if retire_prefix is not None and previous.value != value:
                retired_key = retire_prefix + previous.value
                retired = self._live(retired_key)
                if retired is not None and not retired.claimed:
                    del self._entries[retired_key]
            return previous.value

    async def delete(self, *keys: str) -> int:
        with self._lock:
            removed = 0
            for key in keys:
                if self._live(key) is not None:
                    removed += 1
                self._entries.pop(key, None)
            return removed

    def sweep(self) -> int:
        """Drop expired entries. Returns how many were dropped."""
        with self._lock:
            before = len(self._entries)
            for key in list(self._entries):
                self._live(key)
            return before - len(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
