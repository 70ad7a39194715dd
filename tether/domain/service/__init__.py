"""Domain services."""

from .base import Service
from .device_login_coordinator import DeviceLoginCoordinator
from .identity_resolver import IdentityResolver, Resolution
from .identity_service import IdentityService, LinkingStatus
from .jwt_service import JWTService
from .pairing_coordinator import PairingCoordinator
from .profile_image import ProfileImageMirror
from .role_promotion import PromotionResult, RolePromotionPolicy
from .verification_service import AssertionVerifier, VerificationService

__all__ = [
    "AssertionVerifier",
    "DeviceLoginCoordinator",
    "IdentityResolver",
    "IdentityService",
    "JWTService",
    "LinkingStatus",
    "PairingCoordinator",
    "ProfileImageMirror",
    "PromotionResult",
    "Resolution",
    "RolePromotionPolicy",
    "Service",
    "VerificationService",
]
