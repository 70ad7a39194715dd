"""In-memory linking event repository for testing."""

from tether.domain.model.linking_event import LinkingEvent
from tether.domain.repository.linking_event import LinkingEventRepository
from tether.domain.value import IdentityId, LinkingAction


class InMemoryLinkingEventRepository(LinkingEventRepository):
    """In-memory implementation of LinkingEventRepository for testing."""

    def __init__(self) -> None:
        self._events: list[LinkingEvent] = []

    async def append(self, event: LinkingEvent) -> LinkingEvent:
        """Append an audit event."""
        self._events.append(event)
        return event

    async def list_for_identity(
        self, identity_id: IdentityId, action: LinkingAction | None = None
    ) -> list[LinkingEvent]:
        """List events for an identity, newest first."""
        events = [
            event
            for event in reversed(self._events)
            if event.identity_id == identity_id
            and (action is None or event.action == action)
        ]
        return events
