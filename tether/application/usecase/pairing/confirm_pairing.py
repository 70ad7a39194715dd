"""Confirm pairing use case."""

from pydantic import BaseModel, Field

from tether.application.usecase.common import IdentityInfo
from tether.domain.service import JWTService, PairingCoordinator, VerificationService
from tether.domain.value import LinkFailure, ProviderKind, ResolutionOutcome


class ConfirmPairingRequest(BaseModel):
    """Confirm pairing request from the second device."""

    code: str = Field(min_length=1)
    provider: ProviderKind
    credential: str = Field(min_length=1)  # Provider access token


class ConfirmPairingResponse(BaseModel):
    """Confirm pairing response."""

    outcome: ResolutionOutcome
    role_changed: bool
    identity: IdentityInfo
    access_token: str


class ConfirmPairingUseCase:
    """Use case for linking a provider account through a pairing code."""

    def __init__(
        self,
        verification_service: VerificationService,
        pairing_coordinator: PairingCoordinator,
        jwt_service: JWTService,
    ) -> None:
        """Initialize confirm pairing use case.

        Args:
            verification_service: Provider credential verification
            pairing_coordinator: Pairing domain service
            jwt_service: Session token domain service
        """
        self.verification_service = verification_service
        self.pairing_coordinator = pairing_coordinator
        self.jwt_service = jwt_service

    async def execute(
        self, request: ConfirmPairingRequest
    ) -> ConfirmPairingResponse | LinkFailure:
        """Execute confirm pairing flow.

        The credential is verified before the code is touched, so a rejected
        credential leaves the code usable.

        Args:
            request: Code plus the confirming device's provider credential

        Returns:
            The owner identity with the new binding, or a typed failure
        """
        assertion = await self.verification_service.verify(
            request.provider, request.credential
        )
        if isinstance(assertion, LinkFailure):
            return assertion

        resolution = await self.pairing_coordinator.confirm_pairing(
            request.code, assertion
        )
        if isinstance(resolution, LinkFailure):
            return resolution

        return ConfirmPairingResponse(
            outcome=resolution.outcome,
            role_changed=resolution.role_changed,
            identity=IdentityInfo.from_identity(resolution.identity),
            access_token=self.jwt_service.create_token(resolution.identity),
        )
