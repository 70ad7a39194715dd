"""Unit tests for PairingCoordinator."""

import asyncio
from uuid import uuid4

import pytest

from tether.config import PairingSettings
from tether.domain.error import RepositoryUnavailableError
from tether.domain.value import (
    IdentityId,
    LinkErrorKind,
    LinkFailure,
    LinkingAction,
    PairingStatus,
    ProviderKind,
    ResolutionOutcome,
    Role,
)
from tests.conftest import build_world, make_assertion


class _YieldingStore:
    """Code store view that yields to the event loop before every read.

    Forces concurrent confirmations to interleave between lookup and claim.
    """

    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    async def get(self, key):
        await asyncio.sleep(0)
        return await self._inner.get(key)


class _FailsOnce:
    """Code store view whose next call to one operation raises an outage."""

    def __init__(self, inner, operation: str):
        self._inner = inner
        self._operation = operation
        self.failed = False

    def __getattr__(self, name):
        target = getattr(self._inner, name)
        if name != self._operation or self.failed:
            return target

        async def fail(*args, **kwargs):
            self.failed = True
            raise RepositoryUnavailableError("redis timeout")

        return fail


class TestIssuePairing:
    """Tests for issue_pairing."""

    @pytest.mark.asyncio
    async def test_issue_returns_pending_code(self):
        """Issuing returns a high-entropy code with a fixed window."""
        # Arrange
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")

        # Act
        request = await world.pairing.issue_pairing(owner.id)

        # Assert
        assert not isinstance(request, LinkFailure)
        assert request.owner_id == owner.id
        assert len(request.code) >= 22
        assert request.expires_at - request.created_at == PairingSettings().ttl

        status = await world.pairing.pairing_status(request.code)
        assert status.status == PairingStatus.PENDING

    @pytest.mark.asyncio
    async def test_issue_for_unknown_owner_is_not_found(self):
        world = build_world()

        result = await world.pairing.issue_pairing(IdentityId(uuid4()))

        assert isinstance(result, LinkFailure)
        assert result.kind == LinkErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_codes_are_unique(self):
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")

        codes = {(await world.pairing.issue_pairing(owner.id)).code for _ in range(20)}

        assert len(codes) == 20

    @pytest.mark.asyncio
    async def test_reissue_supersedes_previous_code(self):
        """Only the latest code issued to an owner can be confirmed."""
        # Arrange
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        first = await world.pairing.issue_pairing(owner.id)

        # Act
        second = await world.pairing.issue_pairing(owner.id)

        # Assert
        stale = await world.pairing.confirm_pairing(
            first.code, make_assertion(ProviderKind.META, "m-1")
        )
        assert isinstance(stale, LinkFailure)
        assert stale.kind in (LinkErrorKind.NOT_FOUND, LinkErrorKind.EXPIRED)

        fresh = await world.pairing.confirm_pairing(
            second.code, make_assertion(ProviderKind.META, "m-1")
        )
        assert not isinstance(fresh, LinkFailure)
        assert fresh.outcome == ResolutionOutcome.ACCOUNT_LINKED

    @pytest.mark.asyncio
    async def test_reissue_keeps_consumed_code_readable(self):
        """A consumed code still reports CONSUMED after a new code is issued."""
        # Arrange
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        first = await world.pairing.issue_pairing(owner.id)
        await world.pairing.confirm_pairing(
            first.code, make_assertion(ProviderKind.FACEBOOK, "f-1")
        )

        # Act
        await world.pairing.issue_pairing(owner.id)

        # Assert
        status = await world.pairing.pairing_status(first.code)
        assert status.status == PairingStatus.CONSUMED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["put", "swap"])
    async def test_failed_reissue_never_revives_an_older_code(self, operation):
        """A reissue interrupted by an outage leaves the displayed code current.

        Once a later reissue succeeds, the first code is dead.
        """
        # Arrange
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        first = await world.pairing.issue_pairing(owner.id)
        flaky = _FailsOnce(world.code_store, operation)
        world.pairing.code_store = flaky

        # Act
        interrupted = await world.pairing.issue_pairing(owner.id)
        latest = await world.pairing.issue_pairing(owner.id)

        # Assert
        assert flaky.failed
        assert interrupted.kind == LinkErrorKind.REPOSITORY_UNAVAILABLE
        stale = await world.pairing.confirm_pairing(
            first.code, make_assertion(ProviderKind.META, "m-42")
        )
        assert isinstance(stale, LinkFailure)
        assert stale.kind == LinkErrorKind.NOT_FOUND

        fresh = await world.pairing.confirm_pairing(
            latest.code, make_assertion(ProviderKind.META, "m-42")
        )
        assert fresh.outcome == ResolutionOutcome.ACCOUNT_LINKED

    @pytest.mark.asyncio
    async def test_first_code_still_works_after_failed_reissue(self):
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        first = await world.pairing.issue_pairing(owner.id)
        world.pairing.code_store = _FailsOnce(world.code_store, "swap")

        await world.pairing.issue_pairing(owner.id)

        result = await world.pairing.confirm_pairing(
            first.code, make_assertion(ProviderKind.META, "m-42")
        )
        assert result.outcome == ResolutionOutcome.ACCOUNT_LINKED

    @pytest.mark.asyncio
    async def test_issue_with_store_outage_is_typed_failure(self):
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")

        async def unavailable(*args, **kwargs):
            raise RepositoryUnavailableError("redis down")

        world.code_store.put = unavailable

        result = await world.pairing.issue_pairing(owner.id)

        assert result.kind == LinkErrorKind.REPOSITORY_UNAVAILABLE


class TestConfirmPairing:
    """Tests for confirm_pairing."""

    @pytest.mark.asyncio
    async def test_owner_scenario_links_and_promotes(self):
        """A USER bound to Google pairs a Meta account and becomes ARTIST."""
        # Arrange
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        owner = await world.identities.save(owner.with_role(Role.USER, world.clock.now()))
        request = await world.pairing.issue_pairing(owner.id)
        world.clock.advance(minutes=2)

        # Act
        result = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-42")
        )

        # Assert
        assert not isinstance(result, LinkFailure)
        assert result.outcome == ResolutionOutcome.ACCOUNT_LINKED
        assert result.previous_role == Role.USER
        assert result.identity.role == Role.ARTIST
        assert result.identity.providers == frozenset(
            {ProviderKind.GOOGLE, ProviderKind.META}
        )

        replay = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-42")
        )
        assert replay.kind == LinkErrorKind.ALREADY_CONSUMED

        events = await world.events.list_for_identity(
            owner.id, action=LinkingAction.LINKED
        )
        assert len(events) == 1
        assert events[0].provider == ProviderKind.META
        assert events[0].external_id == "m-42"

    @pytest.mark.asyncio
    async def test_pairing_viewer_provider_does_not_promote(self):
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)

        result = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.FACEBOOK, "f-1")
        )

        assert result.identity.role == Role.GUEST
        assert result.role_changed is False

    @pytest.mark.asyncio
    async def test_concurrent_confirmations_have_a_single_winner(self):
        """N concurrent confirmations of one code produce one success."""
        # Arrange
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)
        world.pairing.code_store = _YieldingStore(world.code_store)

        # Act
        results = await asyncio.gather(
            *(
                world.pairing.confirm_pairing(
                    request.code, make_assertion(ProviderKind.META, "m-1")
                )
                for _ in range(10)
            )
        )

        # Assert
        successes = [r for r in results if not isinstance(r, LinkFailure)]
        failures = [r for r in results if isinstance(r, LinkFailure)]
        assert len(successes) == 1
        assert len(failures) == 9
        assert {f.kind for f in failures} == {LinkErrorKind.ALREADY_CONSUMED}

        stored = await world.identities.find_by_id(owner.id)
        assert stored.binding_for(ProviderKind.META).external_id == "m-1"
        linked = await world.events.list_for_identity(
            owner.id, action=LinkingAction.LINKED
        )
        assert len(linked) == 1

    @pytest.mark.asyncio
    async def test_expired_code_is_never_consumable(self):
        """Past the window confirm reports EXPIRED before the store evicts it."""
        # Arrange
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)
        world.clock.advance(minutes=5, seconds=1)

        # Act
        result = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-1")
        )

        # Assert
        assert result.kind == LinkErrorKind.EXPIRED
        assert (await world.code_store.get(f"pairing:code:{request.code}")) is not None
        stored = await world.identities.find_by_id(owner.id)
        assert not stored.is_bound_to(ProviderKind.META)

    @pytest.mark.asyncio
    async def test_expiry_dominates_consumption(self):
        """A consumed code past its window reports EXPIRED on confirm."""
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)
        await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-1")
        )
        world.clock.advance(minutes=6)

        result = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-1")
        )

        assert result.kind == LinkErrorKind.EXPIRED

    @pytest.mark.asyncio
    async def test_code_past_retention_is_not_found(self):
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)
        settings = PairingSettings()
        world.clock.advance(minutes=settings.ttl_minutes + settings.retention_minutes)

        result = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-1")
        )

        assert result.kind == LinkErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_unknown_code_is_not_found(self):
        world = build_world()

        result = await world.pairing.confirm_pairing(
            "no-such-code", make_assertion(ProviderKind.META, "m-1")
        )

        assert result.kind == LinkErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_provider_already_bound_to_owner(self):
        """Pairing a second account of an already bound kind fails."""
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)

        result = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.GOOGLE, "g-2")
        )

        assert result.kind == LinkErrorKind.ACCOUNT_ALREADY_LINKED

    @pytest.mark.asyncio
    async def test_provider_account_bound_elsewhere(self):
        world = build_world()
        await world.sign_in(ProviderKind.META, "m-1")
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)

        result = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-1")
        )

        assert result.kind == LinkErrorKind.ACCOUNT_ALREADY_LINKED

    @pytest.mark.asyncio
    async def test_failed_write_after_claim_leaves_code_consumed(self):
        """The claim is committed before the identity write and is not undone."""
        # Arrange
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)

        async def unavailable(*args, **kwargs):
            raise RepositoryUnavailableError("database down")

        world.identities.save = unavailable

        # Act
        result = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-1")
        )

        # Assert
        assert result.kind == LinkErrorKind.REPOSITORY_UNAVAILABLE
        retry = await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-1")
        )
        assert retry.kind == LinkErrorKind.ALREADY_CONSUMED


class TestPairingStatus:
    """Tests for pairing_status."""

    @pytest.mark.asyncio
    async def test_status_moves_from_pending_to_consumed(self):
        # Arrange
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)
        world.clock.advance(minutes=1)

        # Act
        await world.pairing.confirm_pairing(
            request.code, make_assertion(ProviderKind.META, "m-1")
        )
        status = await world.pairing.pairing_status(request.code)

        # Assert
        assert status.status == PairingStatus.CONSUMED
        assert status.provider == ProviderKind.META
        assert status.completed_at == world.clock.now()
        assert status.expires_at == request.expires_at

    @pytest.mark.asyncio
    async def test_status_reports_expired(self):
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        request = await world.pairing.issue_pairing(owner.id)
        world.clock.advance(minutes=10)

        status = await world.pairing.pairing_status(request.code)

        assert status.status == PairingStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_status_of_superseded_code_is_not_found(self):
        world = build_world()
        owner = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        first = await world.pairing.issue_pairing(owner.id)
        await world.pairing.issue_pairing(owner.id)

        status = await world.pairing.pairing_status(first.code)

        assert isinstance(status, LinkFailure)
        assert status.kind == LinkErrorKind.NOT_FOUND
