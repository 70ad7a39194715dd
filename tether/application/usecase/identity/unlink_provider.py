"""Unlink provider use case."""

from uuid import UUID

from pydantic import BaseModel

from tether.application.usecase.common import IdentityInfo
from tether.domain.service import IdentityService
from tether.domain.value import IdentityId, LinkFailure, ProviderKind


class UnlinkProviderRequest(BaseModel):
    """Unlink provider request."""

    identity_id: str  # From authenticated identity
    provider: ProviderKind


class UnlinkProviderResponse(BaseModel):
    """Unlink provider response."""

    identity: IdentityInfo


class UnlinkProviderUseCase:
    """Use case for removing a secondary provider account."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(
        self, request: UnlinkProviderRequest
    ) -> UnlinkProviderResponse | LinkFailure:
        identity = await self.identity_service.unlink_provider(
            IdentityId(UUID(request.identity_id)), request.provider
        )
        if isinstance(identity, LinkFailure):
            return identity

        return UnlinkProviderResponse(identity=IdentityInfo.from_identity(identity))
