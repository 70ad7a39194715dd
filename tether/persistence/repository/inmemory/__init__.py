"""In-memory repository implementations for testing."""

from .identity import InMemoryIdentityRepository
from .linking_event import InMemoryLinkingEventRepository

__all__ = [
    "InMemoryIdentityRepository",
    "InMemoryLinkingEventRepository",
]
