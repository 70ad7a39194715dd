"""Get current identity use case."""

from uuid import UUID

from pydantic import BaseModel

from tether.application.usecase.common import IdentityInfo
from tether.domain.service import IdentityService, JWTService
from tether.domain.value import IdentityId, LinkErrorKind, LinkFailure


class GetCurrentIdentityRequest(BaseModel):
    """Get current identity request."""

    token: str  # JWT token


class GetCurrentIdentityResponse(BaseModel):
    """Get current identity response."""

    identity: IdentityInfo


class GetCurrentIdentityUseCase:
    """Use case for getting the authenticated identity."""

    def __init__(
        self,
        jwt_service: JWTService,
        identity_service: IdentityService,
    ) -> None:
        """Initialize get current identity use case.

        Args:
            jwt_service: JWT token domain service
            identity_service: Identity domain service
        """
        self.jwt_service = jwt_service
        self.identity_service = identity_service

    async def execute(
        self, request: GetCurrentIdentityRequest
    ) -> GetCurrentIdentityResponse | LinkFailure:
        """Execute get current identity flow.

        Raises:
            JWTError: If token is invalid or expired
        """
        payload = self.jwt_service.verify_token(request.token)

        identity = await self.identity_service.get_by_id(
            IdentityId(UUID(payload.identity_id))
        )
        if identity is None:
            return LinkFailure(
                kind=LinkErrorKind.NOT_FOUND, message="Identity no longer exists"
            )

        return GetCurrentIdentityResponse(identity=IdentityInfo.from_identity(identity))
