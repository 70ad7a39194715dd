"""Identity repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import and_, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tether.domain.error import ProviderBindingConflictError, RepositoryUnavailableError
from tether.domain.model.identity import Identity
from tether.domain.repository.identity import IdentityRepository
from tether.domain.value import IdentityId, ProviderKind
from tether.persistence.database import translate_outages
from tether.persistence.mappers import binding_to_dict, identity_to_dict, row_to_identity
from tether.persistence.tables import identities_table, provider_bindings_table


class PostgresIdentityRepository(IdentityRepository):
    """PostgreSQL implementation of IdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, identity_id: IdentityId) -> Optional[Identity]:
        """Get identity with its bindings by ID."""
        with translate_outages():
            stmt = select(identities_table).where(identities_table.c.id == identity_id)
            result = await self.session.execute(stmt)
            row = result.mappings().first()
            if not row:
                return None

            bindings = await self.session.execute(
                select(provider_bindings_table).where(
                    provider_bindings_table.c.identity_id == identity_id
                )
            )
            return row_to_identity(
                dict(row), [dict(b) for b in bindings.mappings().all()]
            )

    async def find_by_provider_binding(
        self, provider: ProviderKind, external_id: str
    ) -> Optional[Identity]:
        """Get the identity holding a provider binding."""
        with translate_outages():
            stmt = select(provider_bindings_table.c.identity_id).where(
                provider_bindings_table.c.provider == provider.value,
                provider_bindings_table.c.external_id == external_id,
            )
            result = await self.session.execute(stmt)
            identity_id = result.scalar_one_or_none()

        if identity_id is None:
            return None
        return await self.find_by_id(IdentityId(identity_id))

    async def find_linkable_by_email(
        self, email: str, excluding_provider: ProviderKind
    ) -> Optional[Identity]:
        """Get the oldest identity with this email not yet bound to the provider."""
        with translate_outages():
            already_bound = exists().where(
                and_(
                    provider_bindings_table.c.identity_id == identities_table.c.id,
                    provider_bindings_table.c.provider == excluding_provider.value,
                )
            )
            stmt = (
                select(identities_table.c.id)
                .where(identities_table.c.email == email.lower(), ~already_bound)
                .order_by(identities_table.c.created_at)
                .limit(1)
            )
            result = await self.session.execute(stmt)
            identity_id = result.scalar_one_or_none()

        if identity_id is None:
            return None
        return await self.find_by_id(IdentityId(identity_id))

    async def save(self, identity: Identity) -> Identity:
        """Save identity and synchronize its bindings.

        Runs in a savepoint so a uniqueness violation leaves the request's
        transaction usable.

        Raises:
            ProviderBindingConflictError: If a binding is held by another identity
            RepositoryUnavailableError: If the database cannot be reached
        """
        with translate_outages():
            existing = await self.find_by_id(identity.id)
            stored = existing.providers if existing else frozenset()
            added = [b for b in identity.bindings if b.provider not in stored]
            removed = stored - identity.providers

            try:
                async with self.session.begin_nested():
                    row = identity_to_dict(identity)
                    if existing:
                        await self.session.execute(
                            identities_table.update()
                            .where(identities_table.c.id == identity.id)
                            .values(**row)
                        )
                    else:
                        await self.session.execute(
                            identities_table.insert().values(**row)
                        )

                    if removed:
                        await self.session.execute(
                            provider_bindings_table.delete().where(
                                provider_bindings_table.c.identity_id == identity.id,
                                provider_bindings_table.c.provider.in_(
                                    [p.value for p in removed]
                                ),
                            )
                        )
                    for binding in added:
                        await self.session.execute(
                            provider_bindings_table.insert().values(
                                **binding_to_dict(identity.id, binding)
                            )
                        )
            except IntegrityError as e:
                conflicting = added[0] if added else identity.bindings[0]
                raise ProviderBindingConflictError(
                    conflicting.provider, conflicting.external_id
                ) from e

        return identity
