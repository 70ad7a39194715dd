"""Device login ticket entity."""

from datetime import datetime
from enum import Enum

from tether.domain.model.common import DomainModel
from tether.domain.model.identity import Identity
from tether.domain.value import IdentityId


class RedemptionChannel(str, Enum):
    """Which door of a ticket was used."""

    QR_TOKEN = "qr_token"
    SHORT_CODE = "short_code"


class DeviceLoginTicket(DomainModel):
    """Ephemeral proof that a second device may act as an identity.

    One ticket, two doors: the long ``qr_token`` for scanning and the numeric
    ``short_code`` for typing. Redeeming through either retires both.
    """

    ticket_id: str
    owner_id: IdentityId
    qr_token: str
    short_code: str
    created_at: datetime
    expires_at: datetime | None  # None only for the operator test ticket
    is_operator: bool = False

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at

    def deep_link(self, scheme: str) -> str:
        """Payload encoded into the login QR image."""
        return f"{scheme}://device-login?token={self.qr_token}"


class DeviceLoginRedemption(DomainModel):
    """Successful redemption of a device login ticket."""

    identity: Identity
    channel: RedemptionChannel
    is_operator: bool = False
