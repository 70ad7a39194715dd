"""Issue pairing code use case."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from tether.config import PairingSettings
from tether.domain.service import PairingCoordinator
from tether.domain.value import IdentityId, LinkFailure


class IssuePairingRequest(BaseModel):
    """Issue pairing request."""

    identity_id: str  # From authenticated identity


class IssuePairingResponse(BaseModel):
    """Issue pairing response.

    ``code`` is the secret the confirming device submits. ``display_code``
    is only for the user to compare between screens.
    """

    code: str
    display_code: str
    deep_link: str
    expires_at: datetime


class IssuePairingUseCase:
    """Use case for starting a pairing from a signed-in device."""

    def __init__(
        self, pairing_coordinator: PairingCoordinator, settings: PairingSettings
    ) -> None:
        """Initialize issue pairing use case.

        Args:
            pairing_coordinator: Pairing domain service
            settings: Pairing settings
        """
        self.pairing_coordinator = pairing_coordinator
        self.settings = settings

    async def execute(
        self, request: IssuePairingRequest
    ) -> IssuePairingResponse | LinkFailure:
        """Issue a pairing code, superseding any earlier one."""
        pairing = await self.pairing_coordinator.issue_pairing(
            IdentityId(UUID(request.identity_id))
        )
        if isinstance(pairing, LinkFailure):
            return pairing

        return IssuePairingResponse(
            code=pairing.code,
            display_code=pairing.display_code(self.settings.display_code_length),
            deep_link=pairing.deep_link(self.settings.deep_link_scheme),
            expires_at=pairing.expires_at,
        )
