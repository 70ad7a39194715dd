"""In-memory identity repository for testing."""

from typing import Optional

from tether.domain.error import ProviderBindingConflictError
from tether.domain.model.identity import Identity
from tether.domain.repository.identity import IdentityRepository
from tether.domain.value import IdentityId, ProviderKind


class InMemoryIdentityRepository(IdentityRepository):
    """In-memory implementation of IdentityRepository for testing.

    Enforces the same binding uniqueness as the database constraints and
    counts writes so tests can assert a call persisted nothing.
    """

    def __init__(self) -> None:
        self._identities: dict[IdentityId, Identity] = {}
        self.save_count = 0

    async def find_by_id(self, identity_id: IdentityId) -> Optional[Identity]:
        """Find an identity by ID."""
        return self._identities.get(identity_id)

    async def find_by_provider_binding(
        self, provider: ProviderKind, external_id: str
    ) -> Optional[Identity]:
        """Find the identity holding a provider binding."""
        for identity in self._identities.values():
            binding = identity.binding_for(provider)
            if binding and binding.external_id == external_id:
                return identity
        return None

    async def find_linkable_by_email(
        self, email: str, excluding_provider: ProviderKind
    ) -> Optional[Identity]:
        """Find the oldest identity with this email not bound to the provider."""
        candidates = [
            identity
            for identity in self._identities.values()
            if identity.email == email.lower()
            and not identity.is_bound_to(excluding_provider)
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda i: i.timestamps.created_at)

    async def save(self, identity: Identity) -> Identity:
        """Save or update an identity."""
        for binding in identity.bindings:
            holder = await self.find_by_provider_binding(
                binding.provider, binding.external_id
            )
            if holder is not None and holder.id != identity.id:
                raise ProviderBindingConflictError(
                    binding.provider, binding.external_id
                )

        self._identities[identity.id] = identity
        self.save_count += 1
        return identity
