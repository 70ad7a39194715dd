"""Pairing request entity.

A pairing request is a single-use ticket that authorizes linking one new
provider binding to an existing identity. It lives only in the ephemeral
code store.
"""

from datetime import datetime

from tether.domain.model.common import DomainModel
from tether.domain.value import IdentityId, PairingStatus, ProviderKind


class PairingRequest(DomainModel):
    """Pending or finished pairing ticket keyed by its code."""

    code: str
    owner_id: IdentityId
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Expiry is checked against the clock, never inferred from eviction."""
        return now > self.expires_at

    def display_code(self, length: int = 8) -> str:
        """Short upper-cased prefix shown next to the QR image."""
        return self.code[:length].upper()

    def deep_link(self, scheme: str) -> str:
        """Payload encoded into the pairing QR image."""
        return f"{scheme}://pairing?code={self.code}"


class PairingCompletion(DomainModel):
    """Record of the successful consumption of a pairing code."""

    code: str
    owner_id: IdentityId
    provider: ProviderKind
    external_id: str
    completed_at: datetime


class PairingStatusView(DomainModel):
    """What a status query reports about a pairing code."""

    status: PairingStatus
    expires_at: datetime
    completed_at: datetime | None = None
    provider: ProviderKind | None = None
