"""Domain model entities for Tether."""

from tether.domain.model.device_login import (
    DeviceLoginRedemption,
    DeviceLoginTicket,
    RedemptionChannel,
)
from tether.domain.model.identity import Identity
from tether.domain.model.linking_event import LinkingEvent
from tether.domain.model.pairing import (
    PairingCompletion,
    PairingRequest,
    PairingStatusView,
)

__all__ = [
    "DeviceLoginRedemption",
    "DeviceLoginTicket",
    "Identity",
    "LinkingEvent",
    "PairingCompletion",
    "PairingRequest",
    "PairingStatusView",
    "RedemptionChannel",
]
