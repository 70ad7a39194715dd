"""Unit tests for IdentityResolver."""

from uuid import uuid4

import pytest

from tether.domain.error import RepositoryUnavailableError
from tether.domain.value import (
    IdentityId,
    LinkErrorKind,
    LinkFailure,
    LinkingAction,
    Platform,
    PromotionEvent,
    ProviderKind,
    ResolutionOutcome,
    Role,
)
from tests.conftest import build_world, make_assertion


class _StaleBindingLookups:
    """Repository view whose binding lookups always miss."""

    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    async def find_by_provider_binding(self, provider, external_id):
        return None


class TestResolve:
    """Tests for the resolve method."""

    @pytest.mark.asyncio
    async def test_first_sign_in_creates_identity(self):
        """An unknown binding without email match creates a new identity."""
        # Arrange
        world = build_world()
        assertion = make_assertion(
            ProviderKind.GOOGLE,
            "g-1",
            email="ada@example.com",
            display_name="Ada",
            profile_image_url="https://img.example.com/ada.jpg",
        )

        # Act
        result = await world.resolver.resolve(assertion, Platform.AR)

        # Assert
        assert not isinstance(result, LinkFailure)
        assert result.outcome == ResolutionOutcome.NEW_IDENTITY_CREATED
        assert result.role_changed is False
        assert result.identity.role == Role.GUEST
        assert result.identity.display_name == "Ada"

        stored = await world.identities.find_by_id(result.identity.id)
        assert stored == result.identity

        events = await world.events.list_for_identity(result.identity.id)
        assert [e.action for e in events] == [LinkingAction.CREATED]
        assert world.mirror.scheduled == [
            (result.identity.id, "https://img.example.com/ada.jpg")
        ]

    @pytest.mark.asyncio
    async def test_first_sign_in_from_vr_creates_artist(self):
        """VR sign-ins seed the artist tier."""
        world = build_world()

        identity = await world.sign_in(ProviderKind.GOOGLE, "g-1", Platform.VR)

        assert identity.role == Role.ARTIST

    @pytest.mark.asyncio
    async def test_first_sign_in_with_creation_capable_provider_creates_artist(self):
        """A META first sign-in implies the artist tier even from AR."""
        world = build_world()

        identity = await world.sign_in(ProviderKind.META, "m-1", Platform.AR)

        assert identity.role == Role.ARTIST
        assert identity.artist_qualified_at is not None
        events = await world.events.list_for_identity(identity.id)
        assert [e.action for e in events] == [
            LinkingAction.PROMOTED,
            LinkingAction.CREATED,
        ]
        assert events[0].previous_role == Role.GUEST
        assert events[0].new_role == Role.ARTIST
        assert events[0].provider == ProviderKind.META

    @pytest.mark.asyncio
    async def test_vr_seeded_artist_records_no_promotion(self):
        """A role seeded by the platform is not a promotion."""
        world = build_world()

        identity = await world.sign_in(ProviderKind.META, "m-1", Platform.VR)

        events = await world.events.list_for_identity(identity.id)
        assert [e.action for e in events] == [LinkingAction.CREATED]

    @pytest.mark.asyncio
    async def test_existing_login_writes_nothing_when_profile_unchanged(self):
        """Signing in again returns the same identity with zero saves."""
        # Arrange
        world = build_world()
        identity = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        saves_before = world.identities.save_count
        events_before = len(await world.events.list_for_identity(identity.id))

        # Act
        result = await world.resolver.resolve(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.VR
        )

        # Assert
        assert result.outcome == ResolutionOutcome.EXISTING_LOGIN
        assert result.identity.id == identity.id
        # Platform does not re-seed the role of an existing identity
        assert result.identity.role == Role.GUEST
        assert world.identities.save_count == saves_before
        assert len(await world.events.list_for_identity(identity.id)) == events_before

    @pytest.mark.asyncio
    async def test_existing_login_refreshes_profile(self):
        """A changed display name or image is saved on login."""
        # Arrange
        world = build_world()
        identity = await world.sign_in(ProviderKind.GOOGLE, "g-1")
        world.mirror.scheduled.clear()

        # Act
        result = await world.resolver.resolve(
            make_assertion(
                ProviderKind.GOOGLE,
                "g-1",
                display_name="New Name",
                profile_image_url="https://img.example.com/new.jpg",
            ),
            Platform.AR,
        )

        # Assert
        assert result.outcome == ResolutionOutcome.EXISTING_LOGIN
        stored = await world.identities.find_by_id(identity.id)
        assert stored.display_name == "New Name"
        assert world.mirror.scheduled == [
            (identity.id, "https://img.example.com/new.jpg")
        ]

    @pytest.mark.asyncio
    async def test_matching_email_links_to_existing_identity(self):
        """A new provider with a known email attaches to that identity."""
        # Arrange
        world = build_world()
        original = await world.sign_in(
            ProviderKind.GOOGLE, "g-1", email="ada@example.com"
        )

        # Act
        result = await world.resolver.resolve(
            make_assertion(ProviderKind.FACEBOOK, "f-1", email="ADA@example.com"),
            Platform.AR,
        )

        # Assert
        assert result.outcome == ResolutionOutcome.ACCOUNT_LINKED
        assert result.identity.id == original.id
        assert result.identity.providers == frozenset(
            {ProviderKind.GOOGLE, ProviderKind.FACEBOOK}
        )
        assert result.identity.primary_provider == ProviderKind.GOOGLE
        assert result.role_changed is False

    @pytest.mark.asyncio
    async def test_email_link_with_meta_promotes(self):
        """Linking META through the email path elevates a guest."""
        # Arrange
        world = build_world()
        original = await world.sign_in(
            ProviderKind.GOOGLE, "g-1", email="ada@example.com"
        )

        # Act
        result = await world.resolver.resolve(
            make_assertion(ProviderKind.META, "m-1", email="ada@example.com"),
            Platform.AR,
        )

        # Assert
        assert result.outcome == ResolutionOutcome.ACCOUNT_LINKED
        assert result.role_changed is True
        assert result.previous_role == Role.GUEST
        assert result.identity.role == Role.ARTIST

        events = await world.events.list_for_identity(original.id)
        assert [e.action for e in events] == [
            LinkingAction.PROMOTED,
            LinkingAction.LINKED,
            LinkingAction.CREATED,
        ]
        assert events[0].previous_role == Role.GUEST
        assert events[0].new_role == Role.ARTIST

    @pytest.mark.asyncio
    async def test_email_match_skips_identity_already_bound_to_provider(self):
        """An identity already holding that provider kind is not a link target."""
        # Arrange
        world = build_world()
        first = await world.sign_in(ProviderKind.GOOGLE, "g-1", email="ada@example.com")

        # Act - a second Google account with the same email
        result = await world.resolver.resolve(
            make_assertion(ProviderKind.GOOGLE, "g-2", email="ada@example.com"),
            Platform.AR,
        )

        # Assert
        assert result.outcome == ResolutionOutcome.NEW_IDENTITY_CREATED
        assert result.identity.id != first.id

    @pytest.mark.asyncio
    async def test_blank_external_id_is_invalid(self):
        """Assertions without an external id are rejected before any lookup."""
        world = build_world()

        result = await world.resolver.resolve(
            make_assertion(ProviderKind.GOOGLE, "   "), Platform.AR
        )

        assert isinstance(result, LinkFailure)
        assert result.kind == LinkErrorKind.INVALID_ASSERTION
        assert world.identities.save_count == 0

    @pytest.mark.asyncio
    async def test_repository_outage_is_typed_failure(self):
        """A store outage is reported as REPOSITORY_UNAVAILABLE."""
        # Arrange
        world = build_world()

        async def unavailable(*args, **kwargs):
            raise RepositoryUnavailableError("connection refused")

        world.identities.find_by_provider_binding = unavailable

        # Act
        result = await world.resolver.resolve(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.AR
        )

        # Assert
        assert isinstance(result, LinkFailure)
        assert result.kind == LinkErrorKind.REPOSITORY_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_concurrent_first_sign_in_conflict_is_already_linked(self):
        """Losing a creation race on the same binding yields ACCOUNT_ALREADY_LINKED."""
        # Arrange
        world = build_world()
        await world.sign_in(ProviderKind.GOOGLE, "g-1")

        # The loser saw no binding when it looked
        world.resolver.identity_repository = _StaleBindingLookups(world.identities)

        # Act
        result = await world.resolver.resolve(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.AR
        )

        # Assert
        assert isinstance(result, LinkFailure)
        assert result.kind == LinkErrorKind.ACCOUNT_ALREADY_LINKED


class TestLinkProvider:
    """Tests for the explicit link_provider path."""

    @pytest.mark.asyncio
    async def test_link_provider_attaches_binding(self):
        """Explicit linking attaches the binding without the email heuristic."""
        # Arrange
        world = build_world()
        identity = await world.sign_in(ProviderKind.GOOGLE, "g-1")

        # Act
        result = await world.resolver.link_provider(
            identity.id,
            make_assertion(ProviderKind.META, "m-1"),
            PromotionEvent.provider_linked(ProviderKind.META),
        )

        # Assert
        assert result.outcome == ResolutionOutcome.ACCOUNT_LINKED
        assert result.identity.is_bound_to(ProviderKind.META)
        assert result.identity.role == Role.ARTIST
        assert result.role_changed is True

    @pytest.mark.asyncio
    async def test_link_provider_unknown_identity_is_not_found(self):
        world = build_world()

        result = await world.resolver.link_provider(
            IdentityId(uuid4()),
            make_assertion(ProviderKind.META, "m-1"),
            PromotionEvent.provider_linked(ProviderKind.META),
        )

        assert result.kind == LinkErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_link_provider_kind_already_bound(self):
        """An identity holds at most one binding per provider kind."""
        world = build_world()
        identity = await world.sign_in(ProviderKind.GOOGLE, "g-1")

        result = await world.resolver.link_provider(
            identity.id,
            make_assertion(ProviderKind.GOOGLE, "g-2"),
            PromotionEvent.provider_linked(ProviderKind.GOOGLE),
        )

        assert result.kind == LinkErrorKind.ACCOUNT_ALREADY_LINKED

    @pytest.mark.asyncio
    async def test_link_provider_binding_held_elsewhere(self):
        """A provider account bound to another identity cannot be linked."""
        # Arrange
        world = build_world()
        await world.sign_in(ProviderKind.META, "m-1")
        other = await world.sign_in(ProviderKind.GOOGLE, "g-1")

        # Act
        result = await world.resolver.link_provider(
            other.id,
            make_assertion(ProviderKind.META, "m-1"),
            PromotionEvent.provider_linked(ProviderKind.META),
        )

        # Assert
        assert result.kind == LinkErrorKind.ACCOUNT_ALREADY_LINKED
        stored = await world.identities.find_by_id(other.id)
        assert stored.providers == frozenset({ProviderKind.GOOGLE})
