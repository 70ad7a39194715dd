"""Repository interfaces for the domain layer."""

from tether.domain.repository.code_store import EphemeralCodeStore, StoredCode
from tether.domain.repository.identity import IdentityRepository
from tether.domain.repository.linking_event import LinkingEventRepository

__all__ = [
    "EphemeralCodeStore",
    "IdentityRepository",
    "LinkingEventRepository",
    "StoredCode",
]
