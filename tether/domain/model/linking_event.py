"""Linking audit event.

Append-only record of changes to an identity's bindings and role. Used for
audit and debugging, never for decisions.
"""

from datetime import datetime
from uuid import uuid4

from tether.domain.model.common import DomainModel
from tether.domain.model.identity import Identity
from tether.domain.value import (
    IdentityId,
    LinkingAction,
    LinkingEventId,
    ProviderKind,
    Role,
)


class LinkingEvent(DomainModel):
    """A single audit entry."""

    id: LinkingEventId
    identity_id: IdentityId
    action: LinkingAction
    provider: ProviderKind | None = None
    external_id: str | None = None
    previous_role: Role | None = None
    new_role: Role
    linked_from_identity_id: IdentityId | None = None
    created_at: datetime

    @classmethod
    def record(
        cls,
        identity: Identity,
        action: LinkingAction,
        now: datetime,
        *,
        provider: ProviderKind | None = None,
        external_id: str | None = None,
        previous_role: Role | None = None,
    ) -> "LinkingEvent":
        """Build an event describing ``identity`` after the action."""
        return cls(
            id=LinkingEventId(uuid4()),
            identity_id=identity.id,
            action=action,
            provider=provider,
            external_id=external_id,
            previous_role=previous_role,
            new_role=identity.role,
            created_at=now,
        )
