"""Session token encoding with PyJWT.

Tokens carry the identity id as ``sub`` and the role it had when the
token was minted. A role change is not reflected until the next sign-in.
"""

from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from tether.config import AuthSettings

ISSUER = "tether"
REQUIRED_CLAIMS = ["sub", "role", "iat", "exp", "iss"]


class TokenPayload(BaseModel):
    """Decoded session token claims."""

    sub: str
    role: str
    iat: datetime
    exp: datetime

    @property
    def identity_id(self) -> str:
        return self.sub


class JWTError(Exception):
    """Token could not be decoded or has expired."""


def create_token(
    identity_id: str,
    role: str,
    settings: AuthSettings,
    now: datetime | None = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": identity_id,
        "role": role,
        "iss": ISSUER,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.jwt_expiry_days),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: AuthSettings) -> TokenPayload:
    """Decode a session token, checking signature, issuer and expiry.

    Raises:
        JWTError: If the token is malformed, forged, missing a claim or expired
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=ISSUER,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as e:
        raise JWTError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise JWTError("Invalid token") from e
    return TokenPayload.model_validate(claims)
