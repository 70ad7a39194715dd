"""Get linking history use case."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from tether.application.usecase.base import BaseUseCase
from tether.domain.service import IdentityService
from tether.domain.value import IdentityId, LinkingAction, ProviderKind, Role


class GetHistoryRequest(BaseModel):
    """Get linking history request."""

    identity_id: str  # From authenticated identity


class LinkingEventInfo(BaseModel):
    """Linking event information for response."""

    id: str
    action: LinkingAction
    provider: ProviderKind | None
    previous_role: Role | None
    new_role: Role
    created_at: datetime


class GetHistoryResponse(BaseModel):
    """Get linking history response."""

    events: list[LinkingEventInfo]


class GetHistoryUseCase(BaseUseCase[GetHistoryRequest, GetHistoryResponse]):
    """Use case for listing an identity's linking audit trail."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(self, request: GetHistoryRequest) -> GetHistoryResponse:
        """List linking events, newest first.

        External account ids are not exposed.
        """
        events = await self.identity_service.history(
            IdentityId(UUID(request.identity_id))
        )
        return GetHistoryResponse(
            events=[
                LinkingEventInfo(
                    id=str(event.id),
                    action=event.action,
                    provider=event.provider,
                    previous_role=event.previous_role,
                    new_role=event.new_role,
                    created_at=event.created_at,
                )
                for event in events
            ]
        )
