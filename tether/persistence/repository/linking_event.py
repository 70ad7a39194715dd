"""LinkingEvent repository implementation using PostgreSQL."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tether.domain.model.linking_event import LinkingEvent
from tether.domain.repository.linking_event import LinkingEventRepository
from tether.domain.value import IdentityId, LinkingAction
from tether.persistence.mappers import linking_event_to_dict, row_to_linking_event
from tether.persistence.database import translate_outages
from tether.persistence.tables import linking_events_table


class PostgresLinkingEventRepository(LinkingEventRepository):
    """PostgreSQL implementation of LinkingEventRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def append(self, event: LinkingEvent) -> LinkingEvent:
        """Insert an audit event."""
        with translate_outages():
            await self.session.execute(
                linking_events_table.insert().values(**linking_event_to_dict(event))
            )
            await self.session.flush()
        return event

    async def list_for_identity(
        self, identity_id: IdentityId, action: LinkingAction | None = None
    ) -> list[LinkingEvent]:
        """List events for an identity, newest first."""
        stmt = select(linking_events_table).where(
            linking_events_table.c.identity_id == identity_id
        )
        if action is not None:
            stmt = stmt.where(linking_events_table.c.action == action.value)
        stmt = stmt.order_by(linking_events_table.c.created_at.desc())

        with translate_outages():
            result = await self.session.execute(stmt)
            rows = result.mappings().all()

        return [row_to_linking_event(dict(row)) for row in rows]
