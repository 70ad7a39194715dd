"""Redeem device login ticket use case."""

from pydantic import BaseModel, model_validator

from tether.application.usecase.common import IdentityInfo
from tether.domain.model.device_login import RedemptionChannel
from tether.domain.service import DeviceLoginCoordinator, JWTService
from tether.domain.value import LinkErrorKind, LinkFailure


class RedeemTicketRequest(BaseModel):
    """Redeem device login ticket request.

    Exactly one of ``qr_token`` (scanned) or ``short_code`` (typed) is given.
    """

    qr_token: str | None = None
    short_code: str | None = None

    @model_validator(mode="after")
    def exactly_one_channel(self) -> "RedeemTicketRequest":
        if bool(self.qr_token) == bool(self.short_code):
            raise ValueError("Provide exactly one of qr_token or short_code")
        return self


class RedeemTicketResponse(BaseModel):
    """Redeem device login ticket response."""

    channel: RedemptionChannel
    identity: IdentityInfo
    access_token: str


class RedeemTicketUseCase:
    """Use case for signing in a second device with a ticket."""

    def __init__(
        self,
        device_login_coordinator: DeviceLoginCoordinator,
        jwt_service: JWTService,
    ) -> None:
        """Initialize redeem ticket use case.

        Args:
            device_login_coordinator: Device login domain service
            jwt_service: Session token domain service
        """
        self.device_login_coordinator = device_login_coordinator
        self.jwt_service = jwt_service

    async def execute(
        self, request: RedeemTicketRequest
    ) -> RedeemTicketResponse | LinkFailure:
        """Redeem the ticket through whichever channel was supplied.

        Redeeming through one channel invalidates the other.
        """
        if request.qr_token:
            redemption = await self.device_login_coordinator.redeem_by_token(
                request.qr_token
            )
        elif request.short_code:
            redemption = await self.device_login_coordinator.redeem_by_short_code(
                request.short_code
            )
        else:
            return LinkFailure(
                kind=LinkErrorKind.INVALID_ASSERTION,
                message="Provide exactly one of qr_token or short_code",
            )
        if isinstance(redemption, LinkFailure):
            return redemption

        return RedeemTicketResponse(
            channel=redemption.channel,
            identity=IdentityInfo.from_identity(redemption.identity),
            access_token=self.jwt_service.create_token(redemption.identity),
        )
