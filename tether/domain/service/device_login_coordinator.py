"""Device login coordinator domain service.

Lets a second device act as an identity that is already signed in, without
any account linking. A ticket is stored once and indexed by both of its
redemption channels:

    device_login:ticket:<ticket_id>   DeviceLoginTicket JSON, claimed on redemption
    device_login:token:<qr_token>     ticket id
    device_login:code:<short_code>    ticket id

Both channels lead to the same ticket entry, so the single claim on it decides
which redemption wins and the other channel is dead from then on.
"""

import secrets
from uuid import uuid4

import logfire

from tether.config import DeviceLoginSettings
from tether.domain.error import RepositoryUnavailableError
from tether.domain.model.device_login import (
    DeviceLoginRedemption,
    DeviceLoginTicket,
    RedemptionChannel,
)
from tether.domain.repository import EphemeralCodeStore, IdentityRepository
from tether.domain.value import IdentityId, LinkErrorKind, LinkFailure
from tether.util.clock import Clock

from .base import Service


def _ticket_key(ticket_id: str) -> str:
    return f"device_login:ticket:{ticket_id}"


def _token_key(qr_token: str) -> str:
    return f"device_login:token:{qr_token}"


def _code_key(short_code: str) -> str:
    return f"device_login:code:{short_code}"


class DeviceLoginCoordinator(Service):
    """Issues and redeems device login tickets."""

    def __init__(
        self,
        code_store: EphemeralCodeStore,
        identity_repository: IdentityRepository,
        settings: DeviceLoginSettings,
        clock: Clock,
    ) -> None:
        """Initialize device login coordinator.

        Args:
            code_store: Ephemeral code store
            identity_repository: Identity repository, for owner lookups
            settings: Device login settings
            clock: Time source
        """
        self.code_store = code_store
        self.identity_repository = identity_repository
        self.settings = settings
        self.clock = clock

    async def issue_login_ticket(
        self, owner_id: IdentityId
    ) -> DeviceLoginTicket | LinkFailure:
        """Issue a ticket for a second device to sign in as ``owner_id``.

        Args:
            owner_id: Identity the ticket authorizes

        Returns:
            The new ticket, or a typed failure
        """
        with logfire.span(
            "device_login_coordinator.issue_login_ticket", owner_id=str(owner_id)
        ):
            try:
                owner = await self.identity_repository.find_by_id(owner_id)
                if owner is None:
                    logfire.warn("Device login owner not found", owner_id=str(owner_id))
                    return LinkFailure(
                        kind=LinkErrorKind.NOT_FOUND,
                        message=f"Identity not found: {owner_id}",
                    )

                now = self.clock.now()
                ttl = self.settings.ttl
                ticket_id = uuid4().hex
                qr_token = secrets.token_urlsafe(self.settings.token_bytes)

                short_code = await self._reserve_short_code(ticket_id)
                if short_code is None:
                    logfire.error(
                        "No free short code found",
                        attempts=self.settings.short_code_attempts,
                    )
                    return LinkFailure(
                        kind=LinkErrorKind.REPOSITORY_UNAVAILABLE,
                        message="Could not allocate a short code, try again",
                    )

                ticket = DeviceLoginTicket(
                    ticket_id=ticket_id,
                    owner_id=owner_id,
                    qr_token=qr_token,
                    short_code=short_code,
                    created_at=now,
                    expires_at=now + ttl,
                )
                await self.code_store.put(
                    _ticket_key(ticket_id), ticket.model_dump_json(), ttl
                )
                await self.code_store.put(_token_key(qr_token), ticket_id, ttl)

                logfire.info(
                    "Device login ticket issued",
                    owner_id=str(owner_id),
                    expires_at=ticket.expires_at.isoformat(),
                )
                return ticket
            except RepositoryUnavailableError as e:
                return _unavailable(e)

    async def redeem_by_token(
        self, qr_token: str
    ) -> DeviceLoginRedemption | LinkFailure:
        """Redeem a ticket through its QR token."""
        with logfire.span("device_login_coordinator.redeem_by_token"):
            operator = self.settings.operator_ticket
            if operator.enabled and qr_token == operator.qr_token:
                return await self._redeem_operator(RedemptionChannel.QR_TOKEN)
            return await self._redeem(_token_key(qr_token), RedemptionChannel.QR_TOKEN)

    async def redeem_by_short_code(
        self, short_code: str
    ) -> DeviceLoginRedemption | LinkFailure:
        """Redeem a ticket through its numeric short code."""
        with logfire.span("device_login_coordinator.redeem_by_short_code"):
            operator = self.settings.operator_ticket
            if operator.enabled and short_code == operator.short_code:
                return await self._redeem_operator(RedemptionChannel.SHORT_CODE)
            return await self._redeem(
                _code_key(short_code), RedemptionChannel.SHORT_CODE
            )

    def operator_ticket(self) -> DeviceLoginTicket | None:
        """The configured operator test ticket, if enabled.

        It never expires, is never stored, and can be redeemed any number of times.
        """
        operator = self.settings.operator_ticket
        if not operator.enabled or operator.owner_identity_id is None:
            return None
        return DeviceLoginTicket(
            ticket_id="operator",
            owner_id=IdentityId(operator.owner_identity_id),
            qr_token=operator.qr_token,
            short_code=operator.short_code,
            created_at=self.clock.now(),
            expires_at=None,
            is_operator=True,
        )

    async def _reserve_short_code(self, ticket_id: str) -> str | None:
        digits = self.settings.short_code_digits
        operator = self.settings.operator_ticket
        for _ in range(self.settings.short_code_attempts):
            candidate = f"{secrets.randbelow(10**digits):0{digits}d}"
            if operator.enabled and candidate == operator.short_code:
                continue
            if await self.code_store.put(
                _code_key(candidate), ticket_id, self.settings.ttl, only_if_absent=True
            ):
                return candidate
        return None

    async def _redeem(
        self, channel_key: str, channel: RedemptionChannel
    ) -> DeviceLoginRedemption | LinkFailure:
        try:
            pointer = await self.code_store.get(channel_key)
            if pointer is None:
                logfire.warn("Device login ticket not found", channel=channel.value)
                return _not_found()

            claimed = await self.code_store.claim(_ticket_key(pointer.value))
            if claimed is None:
                logfire.warn(
                    "Device login ticket already redeemed", channel=channel.value
                )
                return _not_found()

            ticket = DeviceLoginTicket.model_validate_json(claimed)
            await self.code_store.delete(
                _ticket_key(ticket.ticket_id),
                _token_key(ticket.qr_token),
                _code_key(ticket.short_code),
            )

            if ticket.is_expired(self.clock.now()):
                logfire.warn(
                    "Device login ticket expired",
                    owner_id=str(ticket.owner_id),
                    channel=channel.value,
                )
                return _not_found()

            identity = await self.identity_repository.find_by_id(ticket.owner_id)
            if identity is None:
                logfire.warn(
                    "Device login owner no longer exists",
                    owner_id=str(ticket.owner_id),
                )
                return _not_found()

            logfire.info(
                "Device login ticket redeemed",
                owner_id=str(ticket.owner_id),
                channel=channel.value,
            )
            return DeviceLoginRedemption(identity=identity, channel=channel)
        except RepositoryUnavailableError as e:
            return _unavailable(e)

    async def _redeem_operator(
        self, channel: RedemptionChannel
    ) -> DeviceLoginRedemption | LinkFailure:
        ticket = self.operator_ticket()
        if ticket is None:
            return _not_found()

        try:
            identity = await self.identity_repository.find_by_id(ticket.owner_id)
        except RepositoryUnavailableError as e:
            return _unavailable(e)
        if identity is None:
            logfire.warn("Operator ticket owner not found", owner_id=str(ticket.owner_id))
            return _not_found()

        logfire.warn(
            "Operator test ticket redeemed",
            owner_id=str(ticket.owner_id),
            channel=channel.value,
        )
        return DeviceLoginRedemption(identity=identity, channel=channel, is_operator=True)


def _not_found() -> LinkFailure:
    return LinkFailure(
        kind=LinkErrorKind.NOT_FOUND, message="Device login ticket not found"
    )


def _unavailable(error: RepositoryUnavailableError) -> LinkFailure:
    logfire.error("Code store unavailable", error=str(error))
    return LinkFailure(kind=LinkErrorKind.REPOSITORY_UNAVAILABLE, message=str(error))
