"""Identity aggregate root.

An identity is the durable account a person controls. It is reachable through
one or more provider bindings, at most one per provider kind.
"""

from datetime import datetime
from uuid import uuid4

from pydantic import model_validator

from tether.domain.error import InvalidRoleTransitionError
from tether.domain.model.common import DomainModel
from tether.domain.value import (
    IdentityId,
    Platform,
    ProviderBinding,
    ProviderKind,
    Role,
    Timestamps,
    UserMode,
    VerifiedProviderAssertion,
)


class Identity(DomainModel):
    """Account aggregate with its provider bindings.

    Invariants enforced on construction:
    - at least one binding, and at most one per provider kind
    - the primary provider is one of the bound providers
    - ``highest_role`` never ranks below ``role``
    """

    id: IdentityId
    display_name: str
    email: str | None = None
    bindings: tuple[ProviderBinding, ...]
    role: Role
    highest_role: Role
    mode: UserMode
    primary_provider: ProviderKind
    profile_image_url: str | None = None
    artist_qualified_at: datetime | None = None
    timestamps: Timestamps

    @model_validator(mode="after")
    def check_invariants(self) -> "Identity":
        if not self.bindings:
            raise ValueError("Identity must hold at least one provider binding")

        kinds = [binding.provider for binding in self.bindings]
        if len(kinds) != len(set(kinds)):
            raise ValueError("Identity may hold at most one binding per provider")

        if self.primary_provider not in kinds:
            raise ValueError("Primary provider must be one of the bound providers")

        if not self.highest_role.is_at_least(self.role):
            raise ValueError("highest_role cannot rank below role")

        return self

    @classmethod
    def create(
        cls,
        assertion: VerifiedProviderAssertion,
        platform: Platform,
        now: datetime,
    ) -> "Identity":
        """Create a new identity from a first-ever sign-in.

        Args:
            assertion: Verified provider assertion for the sign-in
            platform: Platform the sign-in originated from
            now: Creation time

        Returns:
            New identity with a single binding and a platform-seeded role
        """
        role = platform.seed_role
        return cls(
            id=IdentityId(uuid4()),
            display_name=assertion.display_name or _fallback_name(assertion),
            email=assertion.email,
            bindings=(
                ProviderBinding(
                    provider=assertion.provider,
                    external_id=assertion.external_id,
                    linked_at=now,
                ),
            ),
            role=role,
            highest_role=role,
            mode=platform.seed_mode,
            primary_provider=assertion.provider,
            profile_image_url=assertion.profile_image_url,
            artist_qualified_at=now if role.is_at_least(Role.ARTIST) else None,
            timestamps=Timestamps.starting_at(now),
        )

    @property
    def providers(self) -> frozenset[ProviderKind]:
        """Provider kinds currently bound."""
        return frozenset(binding.provider for binding in self.bindings)

    def binding_for(self, provider: ProviderKind) -> ProviderBinding | None:
        """Return the binding for a provider kind, if any."""
        for binding in self.bindings:
            if binding.provider == provider:
                return binding
        return None

    def is_bound_to(self, provider: ProviderKind) -> bool:
        return self.binding_for(provider) is not None

    def with_binding(self, binding: ProviderBinding, now: datetime) -> "Identity":
        """Return a copy with an additional provider binding.

        Raises:
            ValueError: If a binding for that provider kind already exists
        """
        if self.is_bound_to(binding.provider):
            raise ValueError(f"Identity already bound to {binding.provider.value}")
        return self.model_copy(
            update={
                "bindings": self.bindings + (binding,),
                "timestamps": self.timestamps.touched(now),
            }
        )

    def without_binding(self, provider: ProviderKind, now: datetime) -> "Identity":
        """Return a copy with the binding for ``provider`` removed.

        Raises:
            ValueError: If removing it would break an aggregate invariant
        """
        if provider == self.primary_provider:
            raise ValueError("Primary provider cannot be unlinked")
        remaining = tuple(b for b in self.bindings if b.provider != provider)
        if not remaining:
            raise ValueError("Identity must keep at least one provider binding")
        return self.model_copy(
            update={"bindings": remaining, "timestamps": self.timestamps.touched(now)}
        )

    def with_role(self, role: Role, now: datetime) -> "Identity":
        """Return a copy with ``role`` raised to the given tier.

        Also maintains ``highest_role`` and stamps ``artist_qualified_at`` the
        first time the artist tier is reached.

        Raises:
            InvalidRoleTransitionError: If ``role`` ranks below the current role
        """
        if not role.is_at_least(self.role):
            raise InvalidRoleTransitionError(self.role, role)
        if role == self.role:
            return self

        update = {
            "role": role,
            "highest_role": Role.highest(self.highest_role, role),
            "timestamps": self.timestamps.touched(now),
        }
        if role.is_at_least(Role.ARTIST) and self.artist_qualified_at is None:
            update["artist_qualified_at"] = now
        return self.model_copy(update=update)

    def with_refreshed_profile(
        self, assertion: VerifiedProviderAssertion, now: datetime
    ) -> "Identity":
        """Return a copy refreshed from a later sign-in.

        The display name follows the provider. An email is only adopted when the
        identity has none, so a provider can never replace a known address.
        Returns ``self`` unchanged when nothing differs.
        """
        update: dict = {}
        if assertion.display_name and assertion.display_name != self.display_name:
            update["display_name"] = assertion.display_name
        if assertion.email and self.email is None:
            update["email"] = assertion.email
        if (
            assertion.profile_image_url
            and assertion.profile_image_url != self.profile_image_url
        ):
            update["profile_image_url"] = assertion.profile_image_url

        if not update:
            return self
        update["timestamps"] = self.timestamps.touched(now)
        return self.model_copy(update=update)


def _fallback_name(assertion: VerifiedProviderAssertion) -> str:
    if assertion.email:
        return assertion.email.split("@", 1)[0]
    return f"{assertion.provider.value}-{assertion.external_id[:8]}"
