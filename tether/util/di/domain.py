"""Domain layer DI providers."""

from dishka import Scope, provide

from tether.config import AuthSettings, DeviceLoginSettings, PairingSettings
from tether.domain.repository import (
    EphemeralCodeStore,
    IdentityRepository,
    LinkingEventRepository,
)
from tether.domain.service import (
    AssertionVerifier,
    DeviceLoginCoordinator,
    IdentityResolver,
    IdentityService,
    JWTService,
    PairingCoordinator,
    ProfileImageMirror,
    RolePromotionPolicy,
    VerificationService,
)
from tether.domain.value import ProviderKind
from tether.util.clock import Clock
from tether.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide(scope=Scope.APP)
    def get_role_promotion_policy(self) -> RolePromotionPolicy:
        """Provide the role promotion policy. It holds no state."""
        return RolePromotionPolicy()

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings)

    @provide
    def get_verification_service(
        self, verifiers: dict[ProviderKind, AssertionVerifier]
    ) -> VerificationService:
        """Provide provider credential verification service."""
        return VerificationService(verifiers=verifiers)

    @provide
    def get_identity_resolver(
        self,
        identity_repository: IdentityRepository,
        linking_event_repository: LinkingEventRepository,
        promotion_policy: RolePromotionPolicy,
        profile_image_mirror: ProfileImageMirror,
        clock: Clock,
    ) -> IdentityResolver:
        """Provide identity resolver."""
        return IdentityResolver(
            identity_repository=identity_repository,
            linking_event_repository=linking_event_repository,
            promotion_policy=promotion_policy,
            profile_image_mirror=profile_image_mirror,
            clock=clock,
        )

    @provide
    def get_identity_service(
        self,
        identity_repository: IdentityRepository,
        linking_event_repository: LinkingEventRepository,
        promotion_policy: RolePromotionPolicy,
        clock: Clock,
    ) -> IdentityService:
        """Provide identity domain service."""
        return IdentityService(
            identity_repository=identity_repository,
            linking_event_repository=linking_event_repository,
            promotion_policy=promotion_policy,
            clock=clock,
        )

    @provide
    def get_pairing_coordinator(
        self,
        code_store: EphemeralCodeStore,
        identity_repository: IdentityRepository,
        identity_resolver: IdentityResolver,
        settings: PairingSettings,
        clock: Clock,
    ) -> PairingCoordinator:
        """Provide pairing coordinator."""
        return PairingCoordinator(
            code_store=code_store,
            identity_repository=identity_repository,
            identity_resolver=identity_resolver,
            settings=settings,
            clock=clock,
        )

    @provide
    def get_device_login_coordinator(
        self,
        code_store: EphemeralCodeStore,
        identity_repository: IdentityRepository,
        settings: DeviceLoginSettings,
        clock: Clock,
    ) -> DeviceLoginCoordinator:
        """Provide device login coordinator."""
        return DeviceLoginCoordinator(
            code_store=code_store,
            identity_repository=identity_repository,
            settings=settings,
            clock=clock,
        )
