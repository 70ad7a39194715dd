"""Pairing routes.

A signed-in device starts a pairing and shows the code as a QR image; a
second device signed in with another provider confirms it, which links that
provider account to the first device's identity.
"""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Response, status

from tether.application.usecase.pairing import (
    ConfirmPairingUseCase,
    GetPairingStatusUseCase,
    IssuePairingUseCase,
)
from tether.application.usecase.pairing.confirm_pairing import (
    ConfirmPairingRequest,
    ConfirmPairingResponse,
)
from tether.application.usecase.pairing.get_pairing_status import (
    GetPairingStatusRequest,
    GetPairingStatusResponse,
)
from tether.application.usecase.pairing.issue_pairing import (
    IssuePairingRequest,
    IssuePairingResponse,
)
from tether.config import Settings
from tether.domain.service import JWTService
from tether.domain.value import LinkFailure
from tether.interface.api.routes.auth import set_session_cookie
from tether.interface.api.session import require_identity_id, session_token
from tether.interface.error import LinkFailureError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pairing", tags=["pairing"], route_class=DishkaRoute)


@router.post(
    "", response_model=IssuePairingResponse, status_code=status.HTTP_201_CREATED
)
async def issue_pairing(
    use_case: FromDishka[IssuePairingUseCase],
    jwt_service: FromDishka[JWTService],
    token: str | None = Depends(session_token),
) -> IssuePairingResponse:
    """Start a pairing for the authenticated identity.

    Issuing again replaces the previous code.
    """
    identity_id = require_identity_id(jwt_service, token)

    result = await use_case.execute(IssuePairingRequest(identity_id=identity_id))
    if isinstance(result, LinkFailure):
        raise LinkFailureError(result)
    return result


@router.post("/confirm", response_model=ConfirmPairingResponse)
async def confirm_pairing(
    request: ConfirmPairingRequest,
    response: Response,
    use_case: FromDishka[ConfirmPairingUseCase],
    settings: FromDishka[Settings],
) -> ConfirmPairingResponse:
    """Confirm a pairing code from the second device.

    Example:
        POST /pairing/confirm
        {"code": "<code>", "provider": "google", "credential": "<access token>"}
    """
    result = await use_case.execute(request)
    if isinstance(result, LinkFailure):
        logger.warning(f"Pairing confirmation failed: {result.kind.value}")
        raise LinkFailureError(result)

    set_session_cookie(response, result.access_token, settings)
    return result


@router.get("/{code}/status", response_model=GetPairingStatusResponse)
async def get_pairing_status(
    code: str,
    use_case: FromDishka[GetPairingStatusUseCase],
) -> GetPairingStatusResponse:
    """Poll a pairing code. The issuing device uses this to notice completion."""
    result = await use_case.execute(GetPairingStatusRequest(code=code))
    if isinstance(result, LinkFailure):
        raise LinkFailureError(result)
    return result
