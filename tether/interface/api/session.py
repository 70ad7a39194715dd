"""Session credential extraction for authenticated routes."""

from fastapi import Cookie, Header, HTTPException, status

from tether.domain.service import JWTService


def session_token(
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> str | None:
    """Read the session token from a bearer header or the auth_token cookie.

    Devices send the header. Browsers rely on the cookie.
    """
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            return credentials.strip()
    return auth_token


def require_identity_id(jwt_service: JWTService, token: str | None) -> str:
    """Resolve the calling identity or fail with 401.

    Returns:
        Identity ID as a string, ready for use case requests
    """
    identity_id = jwt_service.get_identity_id_from_token(token)
    if identity_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return str(identity_id)
