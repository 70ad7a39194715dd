"""Identity repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from tether.domain.model.identity import Identity
from tether.domain.value import IdentityId, ProviderKind


class IdentityRepository(ABC):
    """Repository for the Identity aggregate.

    The repository is the source of truth for provider binding uniqueness:
    a (provider kind, external id) pair belongs to at most one identity.
    """

    @abstractmethod
    async def find_by_id(self, identity_id: IdentityId) -> Optional[Identity]:
        """Find an identity by ID.

        Args:
            identity_id: The identity's unique identifier

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_provider_binding(
        self, provider: ProviderKind, external_id: str
    ) -> Optional[Identity]:
        """Find the identity holding a provider binding.

        Args:
            provider: The provider kind
            external_id: The provider-assigned account id

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_linkable_by_email(
        self, email: str, excluding_provider: ProviderKind
    ) -> Optional[Identity]:
        """Find an identity by email that has no binding for a provider kind.

        Args:
            email: Normalized (lower-case) email address
            excluding_provider: Identities already bound to this kind are skipped

        Returns:
            The oldest matching identity, None if none qualifies
        """
        pass

    @abstractmethod
    async def save(self, identity: Identity) -> Identity:
        """Save an identity (create or update) with its bindings.

        Args:
            identity: The identity to save

        Returns:
            The saved identity

        Raises:
            ProviderBindingConflictError: If a binding belongs to another identity
            RepositoryUnavailableError: If the store cannot be reached
        """
        pass
