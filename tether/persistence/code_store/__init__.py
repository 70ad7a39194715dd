"""Ephemeral code store implementations."""

from tether.persistence.code_store.memory import InMemoryCodeStore
from tether.persistence.code_store.redis import RedisCodeStore

__all__ = [
    "InMemoryCodeStore",
    "RedisCodeStore",
]
