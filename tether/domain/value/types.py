"""Domain value objects for Tether.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from datetime import datetime
from enum import Enum

from pydantic import field_validator

from tether.domain.value.common import ValueObject


class ProviderKind(str, Enum):
    """Third-party identity providers an identity can be bound to.

    The set is closed. Adding a provider means a new member here, one entry in
    ``CREATION_CAPABLE_PROVIDERS`` if it implies creator intent, and one verifier
    in the adapter layer.
    """

    GOOGLE = "google"
    META = "meta"
    FACEBOOK = "facebook"

    @property
    def is_creation_capable(self) -> bool:
        """Whether binding this provider qualifies an identity for the artist tier."""
        return self in CREATION_CAPABLE_PROVIDERS


CREATION_CAPABLE_PROVIDERS: frozenset[ProviderKind] = frozenset({ProviderKind.META})


class Role(str, Enum):
    """Permission tier of an identity, ordered GUEST < USER < ARTIST < ADMIN."""

    GUEST = "guest"
    USER = "user"
    ARTIST = "artist"
    ADMIN = "admin"

    @property
    def level(self) -> int:
        """Numeric rank used for ordering comparisons."""
        return _ROLE_LEVELS[self]

    def is_at_least(self, other: "Role") -> bool:
        """Check whether this role ranks at or above another."""
        return self.level >= other.level

    @classmethod
    def highest(cls, *roles: "Role") -> "Role":
        """Return the highest-ranked of the given roles."""
        return max(roles, key=lambda r: r.level)


_ROLE_LEVELS = {
    Role.GUEST: 0,
    Role.USER: 1,
    Role.ARTIST: 2,
    Role.ADMIN: 3,
}


class UserMode(str, Enum):
    """UI-facing mode flag. Not authoritative and irrelevant to linking."""

    AR = "ar"
    ARTIST = "artist"


class Platform(str, Enum):
    """Client platform a sign-in originates from."""

    VR = "vr"
    AR = "ar"

    @property
    def seed_role(self) -> Role:
        """Role granted to an identity created from this platform."""
        # VR clients are creation clients
        return Role.ARTIST if self is Platform.VR else Role.GUEST

    @property
    def seed_mode(self) -> UserMode:
        """Mode an identity created from this platform starts in."""
        return UserMode.ARTIST if self is Platform.VR else UserMode.AR


class ResolutionOutcome(str, Enum):
    """Which of the three sign-in scenarios a resolution took."""

    EXISTING_LOGIN = "existing_login"
    ACCOUNT_LINKED = "account_linked"
    NEW_IDENTITY_CREATED = "new_identity_created"


class LinkingAction(str, Enum):
    """Kinds of entries in the linking audit log."""

    CREATED = "created"
    LINKED = "linked"
    PROMOTED = "promoted"
    DEMOTED = "demoted"
    UNLINKED = "unlinked"
    MERGED = "merged"

    @property
    def is_role_change(self) -> bool:
        """Whether this action records a role transition."""
        return self in (LinkingAction.PROMOTED, LinkingAction.DEMOTED)

    @property
    def is_binding_change(self) -> bool:
        """Whether this action adds or removes a provider binding."""
        return self in (
            LinkingAction.CREATED,
            LinkingAction.LINKED,
            LinkingAction.UNLINKED,
            LinkingAction.MERGED,
        )


class PromotionTrigger(str, Enum):
    """Domain events the role promotion policy reacts to."""

    CREATIVE_UPLOAD = "creative_upload"
    PROVIDER_LINKED = "provider_linked"
    PAIRED = "paired"


class PairingStatus(str, Enum):
    """Client-visible state of a pairing code."""

    PENDING = "pending"
    CONSUMED = "consumed"
    EXPIRED = "expired"


class LinkErrorKind(str, Enum):
    """Typed failures returned by the linking and pairing operations."""

    INVALID_ASSERTION = "invalid_assertion"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    ALREADY_CONSUMED = "already_consumed"
    ACCOUNT_ALREADY_LINKED = "account_already_linked"
    VERIFICATION_FAILED = "verification_failed"
    REPOSITORY_UNAVAILABLE = "repository_unavailable"
    UNLINK_NOT_ALLOWED = "unlink_not_allowed"


_USER_MESSAGES = {
    LinkErrorKind.INVALID_ASSERTION: "The sign-in response was incomplete.",
    LinkErrorKind.NOT_FOUND: "This code can no longer be used, please generate a new one.",
    LinkErrorKind.EXPIRED: "This code can no longer be used, please generate a new one.",
    LinkErrorKind.ALREADY_CONSUMED: "This code can no longer be used, please generate a new one.",
    LinkErrorKind.ACCOUNT_ALREADY_LINKED: (
        "This provider account is already linked to a different account."
    ),
    LinkErrorKind.VERIFICATION_FAILED: "The provider could not verify this sign-in.",
    LinkErrorKind.REPOSITORY_UNAVAILABLE: "Network error, please try again.",
    LinkErrorKind.UNLINK_NOT_ALLOWED: (
        "The primary sign-in provider of an account cannot be unlinked."
    ),
}


class LinkFailure(ValueObject):
    """Expected business failure of a linking or pairing operation.

    Returned instead of raised so callers branch on ``kind`` explicitly.
    """

    kind: LinkErrorKind
    message: str

    @property
    def user_message(self) -> str:
        """Message suitable for showing to the person holding the device."""
        return _USER_MESSAGES[self.kind]


class PromotionEvent(ValueObject):
    """A trigger for the role promotion policy.

    Linking triggers carry the provider kind involved since only
    creation-capable providers qualify for elevation.
    """

    trigger: PromotionTrigger
    provider: ProviderKind | None = None

    @classmethod
    def creative_upload(cls) -> "PromotionEvent":
        return cls(trigger=PromotionTrigger.CREATIVE_UPLOAD)

    @classmethod
    def provider_linked(cls, provider: ProviderKind) -> "PromotionEvent":
        return cls(trigger=PromotionTrigger.PROVIDER_LINKED, provider=provider)

    @classmethod
    def paired(cls, provider: ProviderKind) -> "PromotionEvent":
        return cls(trigger=PromotionTrigger.PAIRED, provider=provider)


class VerifiedProviderAssertion(ValueObject):
    """Identity information vouched for by a provider.

    Produced by an assertion verifier after the provider credential checked out.
    Emails are normalized to lower case so that linkable-by-email lookups are
    case-insensitive.
    """

    provider: ProviderKind
    external_id: str  # Permanent provider-assigned id
    email: str | None = None
    display_name: str | None = None
    profile_image_url: str | None = None

    @field_validator("email", "display_name", "profile_image_url")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat blank optional fields as absent."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        """Lower-case emails."""
        return v.lower() if v else v


class ProviderBinding(ValueObject):
    """A (provider kind, external id) pair attached to one identity."""

    provider: ProviderKind
    external_id: str
    linked_at: datetime


class Timestamps(ValueObject):
    """Creation and last-modification times embedded in an aggregate.

    Updated explicitly by the write path via ``touched``.
    """

    created_at: datetime
    updated_at: datetime

    @classmethod
    def starting_at(cls, now: datetime) -> "Timestamps":
        return cls(created_at=now, updated_at=now)

    def touched(self, now: datetime) -> "Timestamps":
        """Return a copy with ``updated_at`` moved to ``now``."""
        return self.model_copy(update={"updated_at": now})
