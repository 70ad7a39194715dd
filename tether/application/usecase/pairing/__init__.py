"""Pairing use cases."""

from .confirm_pairing import ConfirmPairingUseCase
from .get_pairing_status import GetPairingStatusUseCase
from .issue_pairing import IssuePairingUseCase

__all__ = ["ConfirmPairingUseCase", "GetPairingStatusUseCase", "IssuePairingUseCase"]
