"""Ephemeral code store interface.

Short-lived string values keyed by string, each with its own time-to-live.
The pairing and device login coordinators are built on the atomic ``claim``
and ``swap`` operations; every implementation must perform each of them as a
single indivisible step.
"""

from abc import ABC, abstractmethod
from datetime import timedelta

from pydantic import BaseModel, ConfigDict


class StoredCode(BaseModel):
    """A live entry in the code store."""

    model_config = ConfigDict(frozen=True)

    value: str
    claimed: bool = False


class EphemeralCodeStore(ABC):
    """Key to value store with per-key TTL and an atomic claim primitive.

    Entries whose TTL elapsed are treated as absent by every operation.
    A TTL of ``None`` means the entry never expires.
    """

    @abstractmethod
    async def put(
        self,
        key: str,
        value: str,
        ttl: timedelta | None,
        *,
        only_if_absent: bool = False,
    ) -> bool:
        """Store a value, unclaimed.

        Args:
            key: Entry key
            value: Entry value
            ttl: Time to live, None for no expiry
            only_if_absent: Refuse to overwrite a live entry

        Returns:
            False if ``only_if_absent`` was set and a live entry existed
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> StoredCode | None:
        """Read an entry without changing it."""
        pass

    @abstractmethod
    async def claim(self, key: str) -> str | None:
        """Atomically claim an entry.

        If the entry exists and is not yet claimed, mark it claimed and return
        its value. Otherwise return None. At most one caller ever receives the
        value for a given entry.
        """
        pass

    @abstractmethod
    async def swap(
        self,
        key: str,
        value: str,
        ttl: timedelta | None,
        *,
        retire_prefix: str | None = None,
    ) -> str | None:
        """Atomically replace an entry and return the previous value.

        The new entry is unclaimed. Returns None if there was no live entry.
        With ``retire_prefix``, the entry at ``retire_prefix + previous`` is
        deleted in the same step unless it is claimed.
        """
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete entries.

        Returns:
            Number of live entries removed
        """
        pass

    async def ping(self) -> bool:
        """Whether the backing service answers. In-process stores always do."""
        return True
