"""Identity domain service."""

import logfire

from tether.domain.error import RepositoryUnavailableError
from tether.domain.model.common import DomainModel
from tether.domain.model.identity import Identity
from tether.domain.model.linking_event import LinkingEvent
from tether.domain.repository import IdentityRepository, LinkingEventRepository
from tether.domain.value import (
    IdentityId,
    LinkErrorKind,
    LinkFailure,
    LinkingAction,
    PromotionEvent,
    ProviderKind,
    Role,
)
from tether.util.clock import Clock

from .base import Service
from .role_promotion import PromotionResult, RolePromotionPolicy


class LinkingStatus(DomainModel):
    """Summary of an identity's bindings for account settings screens."""

    identity_id: IdentityId
    providers: list[ProviderKind]
    primary_provider: ProviderKind
    role: Role
    highest_role: Role
    can_link: bool
    can_unlink: bool

    @property
    def is_linked(self) -> bool:
        return len(self.providers) > 1

    @property
    def description(self) -> str:
        if self.is_linked:
            names = ", ".join(p.value for p in self.providers)
            return f"Accounts linked: {names}."
        if any(p.is_creation_capable for p in self.providers):
            return "Link a viewer account to browse your work from other devices."
        return "Link a creator account to unlock creation features."


class IdentityService(Service):
    """Domain service for identity reads and explicit binding changes."""

    def __init__(
        self,
        identity_repository: IdentityRepository,
        linking_event_repository: LinkingEventRepository,
        promotion_policy: RolePromotionPolicy,
        clock: Clock,
    ) -> None:
        """Initialize identity service.

        Args:
            identity_repository: Identity repository
            linking_event_repository: Audit event repository
            promotion_policy: Role promotion policy
            clock: Time source
        """
        self.identity_repository = identity_repository
        self.linking_event_repository = linking_event_repository
        self.promotion_policy = promotion_policy
        self.clock = clock

    async def get_by_id(self, identity_id: IdentityId) -> Identity | None:
        """Get identity by ID.

        Args:
            identity_id: Identity ID

        Returns:
            Identity if found, None otherwise
        """
        with logfire.span("identity_service.get_by_id", identity_id=str(identity_id)):
            identity = await self.identity_repository.find_by_id(identity_id)
            if identity is None:
                logfire.warn("Identity not found", identity_id=str(identity_id))
            return identity

    async def linking_status(
        self, identity_id: IdentityId
    ) -> LinkingStatus | LinkFailure:
        """Describe which providers an identity is bound to."""
        with logfire.span(
            "identity_service.linking_status", identity_id=str(identity_id)
        ):
            identity = await self.identity_repository.find_by_id(identity_id)
            if identity is None:
                return _not_found(identity_id)

            providers = [b.provider for b in identity.bindings]
            return LinkingStatus(
                identity_id=identity.id,
                providers=providers,
                primary_provider=identity.primary_provider,
                role=identity.role,
                highest_role=identity.highest_role,
                can_link=len(providers) < len(ProviderKind),
                can_unlink=any(p != identity.primary_provider for p in providers),
            )

    async def unlink_provider(
        self, identity_id: IdentityId, provider: ProviderKind
    ) -> Identity | LinkFailure:
        """Remove a non-primary provider binding.

        The role is left as is. Demotion is a separate administrative act.

        Args:
            identity_id: Identity to change
            provider: Provider kind to unlink

        Returns:
            Updated identity, or a typed failure
        """
        with logfire.span(
            "identity_service.unlink_provider",
            identity_id=str(identity_id),
            provider=provider.value,
        ):
            try:
                identity = await self.identity_repository.find_by_id(identity_id)
                if identity is None:
                    return _not_found(identity_id)

                binding = identity.binding_for(provider)
                if binding is None:
                    return LinkFailure(
                        kind=LinkErrorKind.NOT_FOUND,
                        message=f"No {provider.value} account linked",
                    )
                if provider == identity.primary_provider:
                    logfire.warn(
                        "Refused to unlink primary provider",
                        identity_id=str(identity_id),
                        provider=provider.value,
                    )
                    return LinkFailure(
                        kind=LinkErrorKind.UNLINK_NOT_ALLOWED,
                        message=f"{provider.value} is the primary provider",
                    )

                now = self.clock.now()
                saved = await self.identity_repository.save(
                    identity.without_binding(provider, now)
                )
                await self.linking_event_repository.append(
                    LinkingEvent.record(
                        saved,
                        LinkingAction.UNLINKED,
                        now,
                        provider=provider,
                        external_id=binding.external_id,
                        previous_role=identity.role,
                    )
                )
                logfire.info(
                    "Provider unlinked",
                    identity_id=str(identity_id),
                    provider=provider.value,
                )
                return saved
            except RepositoryUnavailableError as e:
                logfire.error("Identity repository unavailable", error=str(e))
                return LinkFailure(
                    kind=LinkErrorKind.REPOSITORY_UNAVAILABLE, message=str(e)
                )

    async def record_creative_upload(
        self, identity_id: IdentityId
    ) -> PromotionResult | LinkFailure:
        """Apply the promotion policy for a creative-content upload.

        Nothing is written when the role does not change.
        """
        with logfire.span(
            "identity_service.record_creative_upload", identity_id=str(identity_id)
        ):
            try:
                identity = await self.identity_repository.find_by_id(identity_id)
                if identity is None:
                    return _not_found(identity_id)

                now = self.clock.now()
                result = self.promotion_policy.apply(
                    identity, PromotionEvent.creative_upload(), now
                )
                if not result.changed:
                    return result

                saved = await self.identity_repository.save(result.identity)
                await self.linking_event_repository.append(
                    LinkingEvent.record(
                        saved,
                        LinkingAction.PROMOTED,
                        now,
                        previous_role=result.previous_role,
                    )
                )
                return result.model_copy(update={"identity": saved})
            except RepositoryUnavailableError as e:
                logfire.error("Identity repository unavailable", error=str(e))
                return LinkFailure(
                    kind=LinkErrorKind.REPOSITORY_UNAVAILABLE, message=str(e)
                )

    async def history(self, identity_id: IdentityId) -> list[LinkingEvent]:
        """List linking events for an identity, newest first."""
        with logfire.span("identity_service.history", identity_id=str(identity_id)):
            events = await self.linking_event_repository.list_for_identity(identity_id)
            logfire.info(
                "Linking history retrieved",
                identity_id=str(identity_id),
                count=len(events),
            )
            return events


def _not_found(identity_id: IdentityId) -> LinkFailure:
    logfire.warn("Identity not found", identity_id=str(identity_id))
    return LinkFailure(
        kind=LinkErrorKind.NOT_FOUND, message=f"Identity not found: {identity_id}"
    )
