"""Linking event repository interface."""

from abc import ABC, abstractmethod

from tether.domain.model.linking_event import LinkingEvent
from tether.domain.value import IdentityId, LinkingAction


class LinkingEventRepository(ABC):
    """Append-only store for linking audit events."""

    @abstractmethod
    async def append(self, event: LinkingEvent) -> LinkingEvent:
        """Append an event.

        Raises:
            RepositoryUnavailableError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def list_for_identity(
        self, identity_id: IdentityId, action: LinkingAction | None = None
    ) -> list[LinkingEvent]:
        """List events for an identity, newest first.

        Args:
            identity_id: Identity to list events for
            action: Only return events of this kind if given

        Returns:
            List of events (may be empty)
        """
        pass
