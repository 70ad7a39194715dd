"""Get linking status use case."""

from uuid import UUID

from pydantic import BaseModel

from tether.domain.service import IdentityService
from tether.domain.value import IdentityId, LinkFailure, ProviderKind, Role


class GetLinkingStatusRequest(BaseModel):
    """Get linking status request."""

    identity_id: str  # From authenticated identity


class GetLinkingStatusResponse(BaseModel):
    """Get linking status response."""

    identity_id: str
    providers: list[ProviderKind]
    primary_provider: ProviderKind
    role: Role
    highest_role: Role
    is_linked: bool
    can_link: bool
    can_unlink: bool
    description: str


class GetLinkingStatusUseCase:
    """Use case for showing which provider accounts an identity has."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(
        self, request: GetLinkingStatusRequest
    ) -> GetLinkingStatusResponse | LinkFailure:
        status = await self.identity_service.linking_status(
            IdentityId(UUID(request.identity_id))
        )
        if isinstance(status, LinkFailure):
            return status

        return GetLinkingStatusResponse(
            identity_id=str(status.identity_id),
            providers=status.providers,
            primary_provider=status.primary_provider,
            role=status.role,
            highest_role=status.highest_role,
            is_linked=status.is_linked,
            can_link=status.can_link,
            can_unlink=status.can_unlink,
            description=status.description,
        )
