"""PostgreSQL repository implementations."""

from tether.persistence.repository.identity import PostgresIdentityRepository
from tether.persistence.repository.linking_event import PostgresLinkingEventRepository

__all__ = [
    "PostgresIdentityRepository",
    "PostgresLinkingEventRepository",
]
