"""Application layer DI providers."""

from dishka import Scope, provide

from tether.application.usecase.auth import GetCurrentIdentityUseCase, LoginUseCase
from tether.application.usecase.device_login import (
    IssueTicketUseCase,
    RedeemTicketUseCase,
)
from tether.application.usecase.identity import (
    GetHistoryUseCase,
    GetLinkingStatusUseCase,
    LinkProviderUseCase,
    RecordCreativeUploadUseCase,
    UnlinkProviderUseCase,
)
from tether.application.usecase.pairing import (
    ConfirmPairingUseCase,
    GetPairingStatusUseCase,
    IssuePairingUseCase,
)
from tether.config import PairingSettings
from tether.domain.service import (
    DeviceLoginCoordinator,
    IdentityResolver,
    IdentityService,
    JWTService,
    PairingCoordinator,
    VerificationService,
)
from tether.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_login_use_case(
        self,
        verification_service: VerificationService,
        identity_resolver: IdentityResolver,
        jwt_service: JWTService,
    ) -> LoginUseCase:
        """Provide login use case."""
        return LoginUseCase(
            verification_service=verification_service,
            identity_resolver=identity_resolver,
            jwt_service=jwt_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_current_identity_use_case(
        self, jwt_service: JWTService, identity_service: IdentityService
    ) -> GetCurrentIdentityUseCase:
        """Provide get current identity use case."""
        return GetCurrentIdentityUseCase(
            jwt_service=jwt_service, identity_service=identity_service
        )

    # Pairing use cases
    @provide(scope=Scope.REQUEST)
    def get_issue_pairing_use_case(
        self, pairing_coordinator: PairingCoordinator, settings: PairingSettings
    ) -> IssuePairingUseCase:
        """Provide issue pairing use case."""
        return IssuePairingUseCase(
            pairing_coordinator=pairing_coordinator, settings=settings
        )

    @provide(scope=Scope.REQUEST)
    def get_confirm_pairing_use_case(
        self,
        verification_service: VerificationService,
        pairing_coordinator: PairingCoordinator,
        jwt_service: JWTService,
    ) -> ConfirmPairingUseCase:
        """Provide confirm pairing use case."""
        return ConfirmPairingUseCase(
            verification_service=verification_service,
            pairing_coordinator=pairing_coordinator,
            jwt_service=jwt_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_pairing_status_use_case(
        self, pairing_coordinator: PairingCoordinator
    ) -> GetPairingStatusUseCase:
        """Provide get pairing status use case."""
        return GetPairingStatusUseCase(pairing_coordinator=pairing_coordinator)

    # Device login use cases
    @provide(scope=Scope.REQUEST)
    def get_issue_ticket_use_case(
        self,
        device_login_coordinator: DeviceLoginCoordinator,
        pairing_settings: PairingSettings,
    ) -> IssueTicketUseCase:
        """Provide issue device login ticket use case."""
        return IssueTicketUseCase(
            device_login_coordinator=device_login_coordinator,
            pairing_settings=pairing_settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_redeem_ticket_use_case(
        self, device_login_coordinator: DeviceLoginCoordinator, jwt_service: JWTService
    ) -> RedeemTicketUseCase:
        """Provide redeem device login ticket use case."""
        return RedeemTicketUseCase(
            device_login_coordinator=device_login_coordinator,
            jwt_service=jwt_service,
        )

    # Identity use cases
    @provide(scope=Scope.REQUEST)
    def get_linking_status_use_case(
        self, identity_service: IdentityService
    ) -> GetLinkingStatusUseCase:
        """Provide get linking status use case."""
        return GetLinkingStatusUseCase(identity_service=identity_service)

    @provide(scope=Scope.REQUEST)
    def get_link_provider_use_case(
        self,
        verification_service: VerificationService,
        identity_resolver: IdentityResolver,
    ) -> LinkProviderUseCase:
        """Provide link provider use case."""
        return LinkProviderUseCase(
            verification_service=verification_service,
            identity_resolver=identity_resolver,
        )

    @provide(scope=Scope.REQUEST)
    def get_unlink_provider_use_case(
        self, identity_service: IdentityService
    ) -> UnlinkProviderUseCase:
        """Provide unlink provider use case."""
        return UnlinkProviderUseCase(identity_service=identity_service)

    @provide(scope=Scope.REQUEST)
    def get_history_use_case(self, identity_service: IdentityService) -> GetHistoryUseCase:
        """Provide get linking history use case."""
        return GetHistoryUseCase(identity_service=identity_service)

    @provide(scope=Scope.REQUEST)
    def get_record_creative_upload_use_case(
        self, identity_service: IdentityService
    ) -> RecordCreativeUploadUseCase:
        """Provide record creative upload use case."""
        return RecordCreativeUploadUseCase(identity_service=identity_service)
