"""Device login routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Response, status

from tether.application.usecase.device_login import (
    IssueTicketUseCase,
    RedeemTicketUseCase,
)
from tether.application.usecase.device_login.issue_ticket import (
    IssueTicketRequest,
    IssueTicketResponse,
)
from tether.application.usecase.device_login.redeem_ticket import (
    RedeemTicketRequest,
    RedeemTicketResponse,
)
from tether.config import Settings
from tether.domain.service import JWTService
from tether.domain.value import LinkFailure
from tether.interface.api.routes.auth import set_session_cookie
from tether.interface.api.session import require_identity_id, session_token
from tether.interface.error import LinkFailureError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/device-login", tags=["device login"], route_class=DishkaRoute
)


@router.post(
    "/ticket", response_model=IssueTicketResponse, status_code=status.HTTP_201_CREATED
)
async def issue_ticket(
    use_case: FromDishka[IssueTicketUseCase],
    jwt_service: FromDishka[JWTService],
    token: str | None = Depends(session_token),
) -> IssueTicketResponse:
    """Issue a ticket another device can redeem to sign in as the caller."""
    identity_id = require_identity_id(jwt_service, token)

    result = await use_case.execute(IssueTicketRequest(identity_id=identity_id))
    if isinstance(result, LinkFailure):
        raise LinkFailureError(result)
    return result


@router.post("/redeem", response_model=RedeemTicketResponse)
async def redeem_ticket(
    request: RedeemTicketRequest,
    response: Response,
    use_case: FromDishka[RedeemTicketUseCase],
    settings: FromDishka[Settings],
) -> RedeemTicketResponse:
    """Redeem a ticket by scanned QR token or typed short code.

    Example:
        POST /device-login/redeem
        {"short_code": "042713"}
    """
    result = await use_case.execute(request)
    if isinstance(result, LinkFailure):
        logger.warning(f"Device login redemption failed: {result.kind.value}")
        raise LinkFailureError(result)

    set_session_cookie(response, result.access_token, settings)
    return result
