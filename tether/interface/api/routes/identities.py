"""Identity linking routes for the authenticated identity."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tether.application.usecase.identity import (
    GetHistoryUseCase,
    GetLinkingStatusUseCase,
    LinkProviderUseCase,
    RecordCreativeUploadUseCase,
    UnlinkProviderUseCase,
)
from tether.application.usecase.identity.get_history import (
    GetHistoryRequest,
    GetHistoryResponse,
)
from tether.application.usecase.identity.get_linking_status import (
    GetLinkingStatusRequest,
    GetLinkingStatusResponse,
)
from tether.application.usecase.identity.link_provider import (
    LinkProviderRequest,
    LinkProviderResponse,
)
from tether.application.usecase.identity.record_creative_upload import (
    RecordCreativeUploadRequest,
    RecordCreativeUploadResponse,
)
from tether.application.usecase.identity.unlink_provider import (
    UnlinkProviderRequest,
    UnlinkProviderResponse,
)
from tether.domain.service import JWTService
from tether.domain.value import LinkFailure, ProviderKind
from tether.interface.api.session import require_identity_id, session_token
from tether.interface.error import LinkFailureError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/identities", tags=["identities"], route_class=DishkaRoute)


class LinkProviderBody(BaseModel):
    """Link provider request body."""

    provider: ProviderKind
    credential: str = Field(min_length=1)


@router.get("/me/links", response_model=GetLinkingStatusResponse)
async def get_linking_status(
    use_case: FromDishka[GetLinkingStatusUseCase],
    jwt_service: FromDishka[JWTService],
    token: str | None = Depends(session_token),
) -> GetLinkingStatusResponse:
    """Show the provider accounts linked to the caller."""
    identity_id = require_identity_id(jwt_service, token)

    result = await use_case.execute(GetLinkingStatusRequest(identity_id=identity_id))
    if isinstance(result, LinkFailure):
        raise LinkFailureError(result)
    return result


@router.post("/me/links", response_model=LinkProviderResponse)
async def link_provider(
    body: LinkProviderBody,
    use_case: FromDishka[LinkProviderUseCase],
    jwt_service: FromDishka[JWTService],
    token: str | None = Depends(session_token),
) -> LinkProviderResponse:
    """Link another provider account using its access token."""
    identity_id = require_identity_id(jwt_service, token)

    result = await use_case.execute(
        LinkProviderRequest(
            identity_id=identity_id,
            provider=body.provider,
            credential=body.credential,
        )
    )
    if isinstance(result, LinkFailure):
        logger.warning(f"Link {body.provider.value} failed: {result.kind.value}")
        raise LinkFailureError(result)
    return result


@router.delete("/me/links/{provider}", response_model=UnlinkProviderResponse)
async def unlink_provider(
    provider: ProviderKind,
    use_case: FromDishka[UnlinkProviderUseCase],
    jwt_service: FromDishka[JWTService],
    token: str | None = Depends(session_token),
) -> UnlinkProviderResponse:
    """Unlink a provider account other than the primary one."""
    identity_id = require_identity_id(jwt_service, token)

    result = await use_case.execute(
        UnlinkProviderRequest(identity_id=identity_id, provider=provider)
    )
    if isinstance(result, LinkFailure):
        raise LinkFailureError(result)
    return result


@router.get("/me/history", response_model=GetHistoryResponse)
async def get_history(
    use_case: FromDishka[GetHistoryUseCase],
    jwt_service: FromDishka[JWTService],
    token: str | None = Depends(session_token),
) -> GetHistoryResponse:
    """List linking events for the caller, newest first."""
    identity_id = require_identity_id(jwt_service, token)
    return await use_case.execute(GetHistoryRequest(identity_id=identity_id))


@router.post("/me/creative-uploads", response_model=RecordCreativeUploadResponse)
async def record_creative_upload(
    use_case: FromDishka[RecordCreativeUploadUseCase],
    jwt_service: FromDishka[JWTService],
    token: str | None = Depends(session_token),
) -> RecordCreativeUploadResponse:
    """Record that the caller uploaded creative content.

    Called by the content service after a successful upload.
    """
    identity_id = require_identity_id(jwt_service, token)

    result = await use_case.execute(
        RecordCreativeUploadRequest(identity_id=identity_id)
    )
    if isinstance(result, LinkFailure):
        raise LinkFailureError(result)
    return result
