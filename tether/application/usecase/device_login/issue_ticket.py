"""Issue device login ticket use case."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from tether.config import PairingSettings
from tether.domain.service import DeviceLoginCoordinator
from tether.domain.value import IdentityId, LinkFailure


class IssueTicketRequest(BaseModel):
    """Issue device login ticket request."""

    identity_id: str  # From authenticated identity


class IssueTicketResponse(BaseModel):
    """Issue device login ticket response."""

    qr_token: str
    short_code: str
    deep_link: str  # QR payload
    expires_at: datetime


class IssueTicketUseCase:
    """Use case for letting a second device sign in as the current identity."""

    def __init__(
        self,
        device_login_coordinator: DeviceLoginCoordinator,
        pairing_settings: PairingSettings,
    ) -> None:
        """Initialize issue ticket use case.

        Args:
            device_login_coordinator: Device login domain service
            pairing_settings: Provides the deep link scheme
        """
        self.device_login_coordinator = device_login_coordinator
        self.pairing_settings = pairing_settings

    async def execute(
        self, request: IssueTicketRequest
    ) -> IssueTicketResponse | LinkFailure:
        ticket = await self.device_login_coordinator.issue_login_ticket(
            IdentityId(UUID(request.identity_id))
        )
        if isinstance(ticket, LinkFailure):
            return ticket

        assert ticket.expires_at is not None
        return IssueTicketResponse(
            qr_token=ticket.qr_token,
            short_code=ticket.short_code,
            deep_link=ticket.deep_link(self.pairing_settings.deep_link_scheme),
            expires_at=ticket.expires_at,
        )
