"""Authentication routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, HTTPException, Response, status

from tether.application.usecase.auth import GetCurrentIdentityUseCase, LoginUseCase
from tether.application.usecase.auth.get_current_identity import (
    GetCurrentIdentityRequest,
    GetCurrentIdentityResponse,
)
from tether.application.usecase.auth.login import LoginRequest, LoginResponse
from tether.config import Settings
from tether.domain.service import JWTService
from tether.domain.value import LinkFailure
from tether.interface.api.session import require_identity_id, session_token
from tether.interface.error import LinkFailureError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Mirror the session token into an HTTP-only cookie for browser clients."""
    response.set_cookie(
        key="auth_token",
        value=token,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
        max_age=settings.auth.jwt_expiry_days * 24 * 60 * 60,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    login_use_case: FromDishka[LoginUseCase],
    settings: FromDishka[Settings],
) -> LoginResponse:
    """Sign in with a provider access token.

    The provider account resolves to the identity already bound to it, to an
    identity with the same email that lacks this provider, or to a new one.

    Example:
        POST /auth/login
        {"provider": "meta", "credential": "<access token>", "platform": "vr"}
    """
    logger.info(f"Login with {request.provider.value} from {request.platform.value}")

    result = await login_use_case.execute(request)
    if isinstance(result, LinkFailure):
        logger.warning(f"Login failed: {result.kind.value}")
        raise LinkFailureError(result)

    set_session_cookie(response, result.access_token, settings)
    return result


@router.get("/me", response_model=GetCurrentIdentityResponse)
async def get_current_identity(
    use_case: FromDishka[GetCurrentIdentityUseCase],
    jwt_service: FromDishka[JWTService],
    token: str | None = Depends(session_token),
) -> GetCurrentIdentityResponse:
    """Get the authenticated identity."""
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )
    require_identity_id(jwt_service, token)

    result = await use_case.execute(GetCurrentIdentityRequest(token=token))
    if isinstance(result, LinkFailure):
        raise LinkFailureError(result)
    return result


@router.post("/logout")
async def logout(response: Response) -> dict[str, bool]:
    """Clear the session cookie. Bearer tokens simply expire."""
    response.delete_cookie(key="auth_token")
    return {"success": True}
