"""Session tokens for resolved identities."""

from uuid import UUID

import logfire

from tether.config import AuthSettings
from tether.domain.model.identity import Identity
from tether.domain.value import IdentityId
from tether.util.jwt import JWTError, TokenPayload, create_token, verify_token

from .base import Service


class JWTService(Service):
    """Mints and checks the session credential handed to clients.

    Resolution and redemption return identities; only the HTTP edge turns
    them into tokens.
    """

    def __init__(self, auth_settings: AuthSettings) -> None:
        self.auth_settings = auth_settings

    def create_token(self, identity: Identity) -> str:
        role = identity.role.value
        with logfire.span("jwt_service.create_token", identity_id=str(identity.id)):
            token = create_token(str(identity.id), role, self.auth_settings)
            logfire.info("Session token minted", identity_id=str(identity.id), role=role)
            return token

    def verify_token(self, token: str) -> TokenPayload:
        """Decode a session token.

        Raises:
            JWTError: If the token is invalid or expired
        """
        with logfire.span("jwt_service.verify_token"):
            try:
                return verify_token(token, self.auth_settings)
            except JWTError as e:
                logfire.warn("Session token rejected", error=str(e))
                raise

    def get_identity_id_from_token(self, token: str | None) -> IdentityId | None:
        """Identity behind a token, or None when missing, invalid or expired."""
        if not token:
            return None
        try:
            return IdentityId(UUID(self.verify_token(token).identity_id))
        except (JWTError, ValueError):
            return None
