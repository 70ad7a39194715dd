"""Link provider use case."""

from uuid import UUID

from pydantic import BaseModel, Field

from tether.application.usecase.common import IdentityInfo
from tether.domain.service import IdentityResolver, VerificationService
from tether.domain.value import (
    IdentityId,
    LinkFailure,
    PromotionEvent,
    ProviderKind,
)


class LinkProviderRequest(BaseModel):
    """Link provider request."""

    identity_id: str  # From authenticated identity
    provider: ProviderKind
    credential: str = Field(min_length=1)  # Provider access token


class LinkProviderResponse(BaseModel):
    """Link provider response."""

    role_changed: bool
    identity: IdentityInfo


class LinkProviderUseCase:
    """Use case for linking another provider account from a signed-in session.

    Same linking path as pairing, without the code exchange: the one device
    holds both the session and the new provider's credential.
    """

    def __init__(
        self,
        verification_service: VerificationService,
        identity_resolver: IdentityResolver,
    ) -> None:
        """Initialize link provider use case.

        Args:
            verification_service: Provider credential verification
            identity_resolver: Identity resolution domain service
        """
        self.verification_service = verification_service
        self.identity_resolver = identity_resolver

    async def execute(
        self, request: LinkProviderRequest
    ) -> LinkProviderResponse | LinkFailure:
        assertion = await self.verification_service.verify(
            request.provider, request.credential
        )
        if isinstance(assertion, LinkFailure):
            return assertion

        resolution = await self.identity_resolver.link_provider(
            IdentityId(UUID(request.identity_id)),
            assertion,
            PromotionEvent.provider_linked(request.provider),
        )
        if isinstance(resolution, LinkFailure):
            return resolution

        return LinkProviderResponse(
            role_changed=resolution.role_changed,
            identity=IdentityInfo.from_identity(resolution.identity),
        )
