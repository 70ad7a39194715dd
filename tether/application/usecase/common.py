"""Response models shared by several use cases."""

from datetime import datetime

from pydantic import BaseModel

from tether.domain.model.identity import Identity
from tether.domain.value import ProviderKind, Role, UserMode


class ProviderBindingInfo(BaseModel):
    """Provider binding information for response."""

    provider: ProviderKind
    external_id: str
    linked_at: datetime


class IdentityInfo(BaseModel):
    """Identity information for response."""

    identity_id: str
    display_name: str
    email: str | None
    role: Role
    highest_role: Role
    mode: UserMode
    primary_provider: ProviderKind
    profile_image_url: str | None
    providers: list[ProviderBindingInfo]
    created_at: datetime

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityInfo":
        return cls(
            identity_id=str(identity.id),
            display_name=identity.display_name,
            email=identity.email,
            role=identity.role,
            highest_role=identity.highest_role,
            mode=identity.mode,
            primary_provider=identity.primary_provider,
            profile_image_url=identity.profile_image_url,
            providers=[
                ProviderBindingInfo(
                    provider=b.provider,
                    external_id=b.external_id,
                    linked_at=b.linked_at,
                )
                for b in identity.bindings
            ],
            created_at=identity.timestamps.created_at,
        )
