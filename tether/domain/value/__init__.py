"""Domain value objects for Tether."""

from tether.domain.value.identifiers import IdentityId, LinkingEventId
from tether.domain.value.types import (
    CREATION_CAPABLE_PROVIDERS,
    LinkErrorKind,
    LinkFailure,
    LinkingAction,
    PairingStatus,
    Platform,
    PromotionEvent,
    PromotionTrigger,
    ProviderBinding,
    ProviderKind,
    ResolutionOutcome,
    Role,
    Timestamps,
    UserMode,
    VerifiedProviderAssertion,
)

__all__ = [
    # Identifiers
    "IdentityId",
    "LinkingEventId",
    # Types
    "CREATION_CAPABLE_PROVIDERS",
    "LinkErrorKind",
    "LinkFailure",
    "LinkingAction",
    "PairingStatus",
    "Platform",
    "PromotionEvent",
    "PromotionTrigger",
    "ProviderBinding",
    "ProviderKind",
    "ResolutionOutcome",
    "Role",
    "Timestamps",
    "UserMode",
    "VerifiedProviderAssertion",
]
