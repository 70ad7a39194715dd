"""Record creative upload use case."""

from uuid import UUID

from pydantic import BaseModel

from tether.domain.service import IdentityService
from tether.domain.value import IdentityId, LinkFailure, Role


class RecordCreativeUploadRequest(BaseModel):
    """Record creative upload request."""

    identity_id: str  # From authenticated identity


class RecordCreativeUploadResponse(BaseModel):
    """Record creative upload response."""

    previous_role: Role
    role: Role
    promoted: bool


class RecordCreativeUploadUseCase:
    """Use case called when an identity uploads creative content.

    Uploading is handled elsewhere; this only applies the promotion rule.
    """

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(
        self, request: RecordCreativeUploadRequest
    ) -> RecordCreativeUploadResponse | LinkFailure:
        result = await self.identity_service.record_creative_upload(
            IdentityId(UUID(request.identity_id))
        )
        if isinstance(result, LinkFailure):
            return result

        return RecordCreativeUploadResponse(
            previous_role=result.previous_role,
            role=result.identity.role,
            promoted=result.changed,
        )
