"""Unit tests for the Identity aggregate."""

from datetime import timedelta

from pydantic import ValidationError
import pytest

from tether.domain.error import InvalidRoleTransitionError
from tether.domain.model.identity import Identity
from tether.domain.value import (
    Platform,
    ProviderBinding,
    ProviderKind,
    Role,
    UserMode,
)
from tests.conftest import T0, make_assertion


class TestCreate:
    """Tests for Identity.create."""

    def test_vr_sign_in_seeds_artist(self):
        """A first sign-in from VR creates an artist."""
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.VR, T0
        )

        assert identity.role == Role.ARTIST
        assert identity.highest_role == Role.ARTIST
        assert identity.mode == UserMode.ARTIST
        assert identity.artist_qualified_at == T0

    def test_ar_sign_in_seeds_guest(self):
        """A first sign-in from AR creates a guest."""
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.AR, T0
        )

        assert identity.role == Role.GUEST
        assert identity.mode == UserMode.AR
        assert identity.artist_qualified_at is None

    def test_primary_provider_is_first_binding(self):
        """The creating provider becomes the primary and only binding."""
        identity = Identity.create(
            make_assertion(ProviderKind.META, "m-1", email="A@Example.com"),
            Platform.AR,
            T0,
        )

        assert identity.primary_provider == ProviderKind.META
        assert identity.providers == frozenset({ProviderKind.META})
        assert identity.email == "a@example.com"

    def test_display_name_falls_back_to_email_local_part(self):
        """Without a display name the email's local part is used."""
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1", email="ada@example.com"),
            Platform.AR,
            T0,
        )

        assert identity.display_name == "ada"

    def test_display_name_falls_back_to_provider_and_id(self):
        """Without name or email a provider-based name is generated."""
        identity = Identity.create(
            make_assertion(ProviderKind.FACEBOOK, "1234567890"), Platform.AR, T0
        )

        assert identity.display_name == "facebook-12345678"


class TestInvariants:
    """Tests for construction-time invariants."""

    def _base(self) -> Identity:
        return Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.AR, T0
        )

    def test_rejects_empty_bindings(self):
        with pytest.raises(ValidationError):
            Identity.model_validate({**self._base().model_dump(), "bindings": ()})

    def test_rejects_two_bindings_for_one_provider(self):
        identity = self._base()
        duplicate = ProviderBinding(
            provider=ProviderKind.GOOGLE, external_id="g-2", linked_at=T0
        )

        with pytest.raises(ValidationError):
            Identity.model_validate(
                {
                    **identity.model_dump(),
                    "bindings": identity.bindings + (duplicate,),
                }
            )

    def test_rejects_primary_provider_not_bound(self):
        identity = self._base()

        with pytest.raises(ValidationError):
            Identity.model_validate(
                {**identity.model_dump(), "primary_provider": ProviderKind.META}
            )

    def test_rejects_highest_role_below_role(self):
        identity = self._base()

        with pytest.raises(ValidationError):
            Identity.model_validate(
                {
                    **identity.model_dump(),
                    "role": Role.ARTIST,
                    "highest_role": Role.GUEST,
                }
            )


class TestBindings:
    """Tests for adding and removing bindings."""

    def test_with_binding_adds_and_touches(self):
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.AR, T0
        )
        later = T0 + timedelta(minutes=1)

        linked = identity.with_binding(
            ProviderBinding(provider=ProviderKind.META, external_id="m-1", linked_at=later),
            later,
        )

        assert linked.providers == frozenset({ProviderKind.GOOGLE, ProviderKind.META})
        assert linked.binding_for(ProviderKind.META).external_id == "m-1"
        assert linked.timestamps.updated_at == later
        assert linked.timestamps.created_at == T0
        # Original is untouched
        assert identity.providers == frozenset({ProviderKind.GOOGLE})

    def test_with_binding_rejects_second_binding_of_same_kind(self):
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.AR, T0
        )

        with pytest.raises(ValueError, match="already bound"):
            identity.with_binding(
                ProviderBinding(
                    provider=ProviderKind.GOOGLE, external_id="g-2", linked_at=T0
                ),
                T0,
            )

    def test_without_binding_refuses_primary(self):
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.AR, T0
        )

        with pytest.raises(ValueError, match="Primary provider"):
            identity.without_binding(ProviderKind.GOOGLE, T0)


class TestRoleAndProfile:
    """Tests for role changes and profile refreshes."""

    def test_with_role_refuses_lowering(self):
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.VR, T0
        )

        with pytest.raises(InvalidRoleTransitionError):
            identity.with_role(Role.GUEST, T0)

    def test_with_role_same_role_returns_self(self):
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.AR, T0
        )

        assert identity.with_role(Role.GUEST, T0) is identity

    def test_with_role_keeps_first_qualification_time(self):
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1"), Platform.VR, T0
        )

        admin = identity.with_role(Role.ADMIN, T0 + timedelta(days=1))

        assert admin.role == Role.ADMIN
        assert admin.highest_role == Role.ADMIN
        assert admin.artist_qualified_at == T0

    def test_refresh_without_changes_returns_self(self):
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1", display_name="Ada"),
            Platform.AR,
            T0,
        )

        refreshed = identity.with_refreshed_profile(
            make_assertion(ProviderKind.GOOGLE, "g-1", display_name="Ada"), T0
        )

        assert refreshed is identity

    def test_refresh_never_replaces_known_email(self):
        identity = Identity.create(
            make_assertion(ProviderKind.GOOGLE, "g-1", email="ada@example.com"),
            Platform.AR,
            T0,
        )

        refreshed = identity.with_refreshed_profile(
            make_assertion(
                ProviderKind.GOOGLE,
                "g-1",
                email="other@example.com",
                display_name="Ada L.",
            ),
            T0,
        )

        assert refreshed.email == "ada@example.com"
        assert refreshed.display_name == "Ada L."

    def test_refresh_adopts_email_when_missing(self):
        identity = Identity.create(
            make_assertion(ProviderKind.META, "m-1", display_name="Ada"),
            Platform.AR,
            T0,
        )

        refreshed = identity.with_refreshed_profile(
            make_assertion(ProviderKind.META, "m-1", email="ada@example.com"), T0
        )

        assert refreshed.email == "ada@example.com"
