"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict, Iterable
from uuid import UUID

from tether.domain.model import Identity, LinkingEvent
from tether.domain.value import (
    IdentityId,
    LinkingAction,
    LinkingEventId,
    ProviderBinding,
    ProviderKind,
    Role,
    Timestamps,
    UserMode,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_binding(row: Dict[str, Any]) -> ProviderBinding:
    """Convert a provider_bindings row to a ProviderBinding value."""
    return ProviderBinding(
        provider=ProviderKind(row["provider"]),
        external_id=row["external_id"],
        linked_at=row["linked_at"],
    )


def row_to_identity(
    row: Dict[str, Any], binding_rows: Iterable[Dict[str, Any]]
) -> Identity:
    """Convert an identities row and its binding rows to an Identity.

    Args:
        row: identities row as dict
        binding_rows: provider_bindings rows for that identity

    Returns:
        Identity domain model
    """
    bindings = sorted(
        (row_to_binding(b) for b in binding_rows), key=lambda b: b.linked_at
    )
    return Identity(
        id=IdentityId(_uuid(row["id"])),
        display_name=row["display_name"],
        email=row.get("email"),
        bindings=tuple(bindings),
        role=Role(row["role"]),
        highest_role=Role(row["highest_role"]),
        mode=UserMode(row["mode"]),
        primary_provider=ProviderKind(row["primary_provider"]),
        profile_image_url=row.get("profile_image_url"),
        artist_qualified_at=row.get("artist_qualified_at"),
        timestamps=Timestamps(
            created_at=row["created_at"], updated_at=row["updated_at"]
        ),
    )


def identity_to_dict(identity: Identity) -> Dict[str, Any]:
    """Convert an Identity to an identities row (bindings excluded)."""
    return {
        "id": identity.id,
        "display_name": identity.display_name,
        "email": identity.email,
        "role": identity.role.value,
        "highest_role": identity.highest_role.value,
        "mode": identity.mode.value,
        "primary_provider": identity.primary_provider.value,
        "profile_image_url": identity.profile_image_url,
        "artist_qualified_at": identity.artist_qualified_at,
        "created_at": identity.timestamps.created_at,
        "updated_at": identity.timestamps.updated_at,
    }


def binding_to_dict(identity_id: IdentityId, binding: ProviderBinding) -> Dict[str, Any]:
    """Convert a ProviderBinding to a provider_bindings row."""
    return {
        "identity_id": identity_id,
        "provider": binding.provider.value,
        "external_id": binding.external_id,
        "linked_at": binding.linked_at,
    }


def row_to_linking_event(row: Dict[str, Any]) -> LinkingEvent:
    """Convert a linking_events row to a LinkingEvent."""
    linked_from = row.get("linked_from_identity_id")
    return LinkingEvent(
        id=LinkingEventId(_uuid(row["id"])),
        identity_id=IdentityId(_uuid(row["identity_id"])),
        action=LinkingAction(row["action"]),
        provider=ProviderKind(row["provider"]) if row.get("provider") else None,
        external_id=row.get("external_id"),
        previous_role=Role(row["previous_role"]) if row.get("previous_role") else None,
        new_role=Role(row["new_role"]),
        linked_from_identity_id=IdentityId(_uuid(linked_from)) if linked_from else None,
        created_at=row["created_at"],
    )


def linking_event_to_dict(event: LinkingEvent) -> Dict[str, Any]:
    """Convert a LinkingEvent to a linking_events row."""
    return event.model_dump(mode="json") | {
        "id": event.id,
        "identity_id": event.identity_id,
        "linked_from_identity_id": event.linked_from_identity_id,
        "created_at": event.created_at,
    }
