"""Pairing coordinator domain service.

A pairing code lets a second device attach its provider account to an
identity that is already signed in elsewhere. Codes live in the ephemeral
code store:

    pairing:code:<code>     PairingRequest JSON, claimed on consumption
    pairing:owner:<owner>   the owner's latest issued code
    pairing:done:<code>     PairingCompletion JSON for status queries

Entries are kept for the pairing window plus a retention period so that
confirm and status can tell an expired code from an unknown one.
"""

import secrets

import logfire

from tether.config import PairingSettings
from tether.domain.error import RepositoryUnavailableError
from tether.domain.model.pairing import (
    PairingCompletion,
    PairingRequest,
    PairingStatusView,
)
from tether.domain.repository import EphemeralCodeStore, IdentityRepository
from tether.domain.value import (
    IdentityId,
    LinkErrorKind,
    LinkFailure,
    PairingStatus,
    PromotionEvent,
    VerifiedProviderAssertion,
)
from tether.util.clock import Clock

from .base import Service
from .identity_resolver import IdentityResolver, Resolution


def _code_key(code: str) -> str:
    return f"pairing:code:{code}"


def _owner_key(owner_id: IdentityId) -> str:
    return f"pairing:owner:{owner_id}"


def _done_key(code: str) -> str:
    return f"pairing:done:{code}"


class PairingCoordinator(Service):
    """Issues and consumes single-use pairing codes."""

    def __init__(
        self,
        code_store: EphemeralCodeStore,
        identity_repository: IdentityRepository,
        identity_resolver: IdentityResolver,
        settings: PairingSettings,
        clock: Clock,
    ) -> None:
        """Initialize pairing coordinator.

        Args:
            code_store: Ephemeral code store
            identity_repository: Identity repository, for owner lookups
            identity_resolver: Resolver whose linking path completes a pairing
            settings: Pairing settings
            clock: Time source
        """
        self.code_store = code_store
        self.identity_repository = identity_repository
        self.identity_resolver = identity_resolver
        self.settings = settings
        self.clock = clock

    async def issue_pairing(self, owner_id: IdentityId) -> PairingRequest | LinkFailure:
        """Issue a new pairing code for an identity.

        Any code previously issued to the same owner that has not been consumed
        is deleted before this returns, so only the latest code can succeed.

        Args:
            owner_id: Identity that will receive the new provider binding

        Returns:
            The pending pairing request, or a typed failure
        """
        with logfire.span("pairing_coordinator.issue_pairing", owner_id=str(owner_id)):
            try:
                owner = await self.identity_repository.find_by_id(owner_id)
                if owner is None:
                    logfire.warn("Pairing owner not found", owner_id=str(owner_id))
                    return LinkFailure(
                        kind=LinkErrorKind.NOT_FOUND,
                        message=f"Identity not found: {owner_id}",
                    )

                now = self.clock.now()
                request = PairingRequest(
                    code=secrets.token_urlsafe(self.settings.code_bytes),
                    owner_id=owner_id,
                    created_at=now,
                    expires_at=now + self.settings.ttl,
                )
                await self.code_store.put(
                    _code_key(request.code),
                    request.model_dump_json(),
                    self.settings.storage_ttl,
                )

                # Moving the owner pointer and deleting the replaced code are one
                # store step. If it fails the previous code stays current and
                # the new one is never handed out.
                previous = await self.code_store.swap(
                    _owner_key(owner_id),
                    request.code,
                    self.settings.storage_ttl,
                    retire_prefix=_code_key(""),
                )

                logfire.info(
                    "Pairing code issued",
                    owner_id=str(owner_id),
                    display_code=request.display_code(
                        self.settings.display_code_length
                    ),
                    expires_at=request.expires_at.isoformat(),
                    superseded=bool(previous),
                )
                return request
            except RepositoryUnavailableError as e:
                return _unavailable(e)

    async def confirm_pairing(
        self, code: str, assertion: VerifiedProviderAssertion
    ) -> Resolution | LinkFailure:
        """Consume a pairing code and link the asserted provider account.

        Exactly one of any number of concurrent confirmations of the same code
        succeeds; the rest get ALREADY_CONSUMED. The claim is committed in the
        code store before the identity is written, so a failed write leaves the
        code consumed and the client must request a new one.

        Args:
            code: Pairing code shown by the owner's device
            assertion: Verified assertion from the confirming device

        Returns:
            Resolution with outcome ACCOUNT_LINKED, or a typed failure
        """
        with logfire.span(
            "pairing_coordinator.confirm_pairing",
            provider=assertion.provider.value,
            display_code=code[: self.settings.display_code_length].upper(),
        ):
            try:
                stored = await self.code_store.get(_code_key(code))
                if stored is None:
                    logfire.warn("Pairing code not found")
                    return _not_found()

                request = PairingRequest.model_validate_json(stored.value)
                if request.is_expired(self.clock.now()):
                    logfire.warn(
                        "Pairing code expired",
                        owner_id=str(request.owner_id),
                        expires_at=request.expires_at.isoformat(),
                    )
                    return LinkFailure(
                        kind=LinkErrorKind.EXPIRED, message="Pairing code has expired"
                    )

                if stored.claimed or await self.code_store.claim(_code_key(code)) is None:
                    return await self._claim_lost(code)

                logfire.info(
                    "Pairing code claimed",
                    owner_id=str(request.owner_id),
                    provider=assertion.provider.value,
                )
            except RepositoryUnavailableError as e:
                return _unavailable(e)

            result = await self.identity_resolver.link_provider(
                request.owner_id, assertion, PromotionEvent.paired(assertion.provider)
            )
            if isinstance(result, LinkFailure):
                logfire.warn(
                    "Pairing claimed but linking failed",
                    owner_id=str(request.owner_id),
                    error=result.kind.value,
                )
                return result

            await self._record_completion(request, assertion)
            logfire.info(
                "Pairing completed",
                owner_id=str(request.owner_id),
                provider=assertion.provider.value,
                role=result.identity.role.value,
            )
            return result

    async def pairing_status(self, code: str) -> PairingStatusView | LinkFailure:
        """Report whether a pairing code is pending, consumed or expired.

        Superseded codes and codes past their retention period are NOT_FOUND.
        """
        with logfire.span("pairing_coordinator.pairing_status"):
            try:
                stored = await self.code_store.get(_code_key(code))
                if stored is None:
                    return _not_found()

                request = PairingRequest.model_validate_json(stored.value)
                if stored.claimed:
                    done = await self.code_store.get(_done_key(code))
                    completion = (
                        PairingCompletion.model_validate_json(done.value)
                        if done
                        else None
                    )
                    return PairingStatusView(
                        status=PairingStatus.CONSUMED,
                        expires_at=request.expires_at,
                        completed_at=completion.completed_at if completion else None,
                        provider=completion.provider if completion else None,
                    )

                status = (
                    PairingStatus.EXPIRED
                    if request.is_expired(self.clock.now())
                    else PairingStatus.PENDING
                )
                return PairingStatusView(status=status, expires_at=request.expires_at)
            except RepositoryUnavailableError as e:
                return _unavailable(e)

    async def _claim_lost(self, code: str) -> LinkFailure:
        # The entry vanishes only when superseded or evicted
        if await self.code_store.get(_code_key(code)) is None:
            logfire.warn("Pairing code disappeared before claim")
            return _not_found()
        logfire.warn("Pairing code already consumed")
        return LinkFailure(
            kind=LinkErrorKind.ALREADY_CONSUMED,
            message="Pairing code has already been used",
        )

    async def _record_completion(
        self, request: PairingRequest, assertion: VerifiedProviderAssertion
    ) -> None:
        completion = PairingCompletion(
            code=request.code,
            owner_id=request.owner_id,
            provider=assertion.provider,
            external_id=assertion.external_id,
            completed_at=self.clock.now(),
        )
        try:
            await self.code_store.put(
                _done_key(request.code),
                completion.model_dump_json(),
                self.settings.storage_ttl,
            )
        except RepositoryUnavailableError as e:
            # Status queries fall back to "consumed" without details
            logfire.warn("Could not record pairing completion", error=str(e))


def _not_found() -> LinkFailure:
    return LinkFailure(kind=LinkErrorKind.NOT_FOUND, message="Pairing code not found")


def _unavailable(error: RepositoryUnavailableError) -> LinkFailure:
    logfire.error("Code store unavailable", error=str(error))
    return LinkFailure(kind=LinkErrorKind.REPOSITORY_UNAVAILABLE, message=str(error))
