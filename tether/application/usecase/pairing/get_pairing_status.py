"""Get pairing status use case."""

from datetime import datetime

from pydantic import BaseModel

from tether.application.usecase.base import BaseUseCase
from tether.domain.service import PairingCoordinator
from tether.domain.value import LinkFailure, PairingStatus, ProviderKind


class GetPairingStatusRequest(BaseModel):
    """Get pairing status request."""

    code: str


class GetPairingStatusResponse(BaseModel):
    """Get pairing status response."""

    status: PairingStatus
    expires_at: datetime
    completed_at: datetime | None
    provider: ProviderKind | None


class GetPairingStatusUseCase(
    BaseUseCase[GetPairingStatusRequest, GetPairingStatusResponse]
):
    """Use case for polling a pairing code from the issuing device."""

    def __init__(self, pairing_coordinator: PairingCoordinator) -> None:
        self.pairing_coordinator = pairing_coordinator

    async def execute(
        self, request: GetPairingStatusRequest
    ) -> GetPairingStatusResponse | LinkFailure:
        view = await self.pairing_coordinator.pairing_status(request.code)
        if isinstance(view, LinkFailure):
            return view

        return GetPairingStatusResponse(
            status=view.status,
            expires_at=view.expires_at,
            completed_at=view.completed_at,
            provider=view.provider,
        )
