"""Login use case."""

import logfire
from pydantic import BaseModel, Field

from tether.application.usecase.base import BaseUseCase
from tether.application.usecase.common import IdentityInfo
from tether.domain.service import IdentityResolver, JWTService, VerificationService
from tether.domain.value import LinkFailure, Platform, ProviderKind, ResolutionOutcome


class LoginRequest(BaseModel):
    """Login request with a raw provider credential."""

    provider: ProviderKind
    credential: str = Field(min_length=1)  # Provider access token
    platform: Platform = Platform.AR


class LoginResponse(BaseModel):
    """Login response."""

    outcome: ResolutionOutcome
    role_changed: bool
    identity: IdentityInfo
    access_token: str


class LoginUseCase(BaseUseCase[LoginRequest, LoginResponse]):
    """Use case for signing in with a provider account."""

    def __init__(
        self,
        verification_service: VerificationService,
        identity_resolver: IdentityResolver,
        jwt_service: JWTService,
    ) -> None:
        """Initialize login use case.

        Args:
            verification_service: Provider credential verification
            identity_resolver: Identity resolution domain service
            jwt_service: Session token domain service
        """
        self.verification_service = verification_service
        self.identity_resolver = identity_resolver
        self.jwt_service = jwt_service

    async def execute(self, request: LoginRequest) -> LoginResponse | LinkFailure:
        """Execute login flow.

        Steps:
        1. Verify the credential with the provider
        2. Resolve the assertion to an existing, linked or new identity
        3. Mint a session token for the identity

        Args:
            request: Login request

        Returns:
            Login response with session token, or a typed failure
        """
        assertion = await self.verification_service.verify(
            request.provider, request.credential
        )
        if isinstance(assertion, LinkFailure):
            return assertion

        resolution = await self.identity_resolver.resolve(assertion, request.platform)
        if isinstance(resolution, LinkFailure):
            return resolution

        logfire.info(
            "Identity signed in",
            identity_id=str(resolution.identity.id),
            provider=request.provider.value,
            outcome=resolution.outcome.value,
        )

        return LoginResponse(
            outcome=resolution.outcome,
            role_changed=resolution.role_changed,
            identity=IdentityInfo.from_identity(resolution.identity),
            access_token=self.jwt_service.create_token(resolution.identity),
        )
