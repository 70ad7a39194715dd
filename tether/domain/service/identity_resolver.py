"""Identity resolution domain service.

Reconciles a verified provider sign-in into exactly one of: an existing login,
a new provider linked to an existing identity, or a brand-new identity.
"""

import sys

import logfire

from tether.domain.error import ProviderBindingConflictError, RepositoryUnavailableError
from tether.domain.model.common import DomainModel
from tether.domain.model.identity import Identity
from tether.domain.model.linking_event import LinkingEvent
from tether.domain.repository import IdentityRepository, LinkingEventRepository
from tether.domain.value import (
    IdentityId,
    LinkErrorKind,
    LinkFailure,
    LinkingAction,
    Platform,
    PromotionEvent,
    ProviderBinding,
    ResolutionOutcome,
    Role,
    VerifiedProviderAssertion,
)
from tether.util.clock import Clock

from .base import Service
from .profile_image import ProfileImageMirror
from .role_promotion import RolePromotionPolicy


class Resolution(DomainModel):
    """Successful resolution of a sign-in or link."""

    identity: Identity
    outcome: ResolutionOutcome
    previous_role: Role

    @property
    def role_changed(self) -> bool:
        return self.identity.role != self.previous_role


class IdentityResolver(Service):
    """Decision engine for provider sign-ins and provider linking."""

    def __init__(
        self,
        identity_repository: IdentityRepository,
        linking_event_repository: LinkingEventRepository,
        promotion_policy: RolePromotionPolicy,
        profile_image_mirror: ProfileImageMirror,
        clock: Clock,
    ) -> None:
        """Initialize identity resolver.

        Args:
            identity_repository: Identity repository
            linking_event_repository: Audit event repository
            promotion_policy: Role promotion policy
            profile_image_mirror: Queue for profile image copies
            clock: Time source
        """
        self.identity_repository = identity_repository
        self.linking_event_repository = linking_event_repository
        self.promotion_policy = promotion_policy
        self.profile_image_mirror = profile_image_mirror
        self.clock = clock

    async def resolve(
        self, assertion: VerifiedProviderAssertion, platform: Platform
    ) -> Resolution | LinkFailure:
        """Resolve a verified sign-in to an identity.

        The steps are tried in order: existing binding, linkable identity with
        the same email, then creation. An existing login never changes role and
        writes nothing when the profile is unchanged.

        Args:
            assertion: Verified provider assertion
            platform: Platform the sign-in originated from

        Returns:
            Resolution with its outcome, or a typed failure
        """
        with logfire.span(
            "identity_resolver.resolve",
            provider=assertion.provider.value,
            platform=platform.value,
        ):
            invalid = _check_assertion(assertion)
            if invalid:
                return invalid

            try:
                existing = await self.identity_repository.find_by_provider_binding(
                    assertion.provider, assertion.external_id
                )
                if existing:
                    return await self._existing_login(existing, assertion)

                if assertion.email:
                    linkable = await self.identity_repository.find_linkable_by_email(
                        assertion.email, assertion.provider
                    )
                    if linkable:
                        return await self._attach(
                            linkable,
                            assertion,
                            PromotionEvent.provider_linked(assertion.provider),
                        )

                return await self._create(assertion, platform)
            except ProviderBindingConflictError as e:
                return _conflict(e)
            except RepositoryUnavailableError as e:
                return _unavailable(e)

    async def link_provider(
        self,
        identity_id: IdentityId,
        assertion: VerifiedProviderAssertion,
        event: PromotionEvent,
    ) -> Resolution | LinkFailure:
        """Attach a provider binding to a known identity.

        This is the explicit linking path used by pairing and manual linking.
        It never consults the email heuristic.

        Args:
            identity_id: Identity receiving the binding
            assertion: Verified assertion for the provider account to attach
            event: Promotion event to apply after linking

        Returns:
            Resolution with outcome ACCOUNT_LINKED, or a typed failure
        """
        with logfire.span(
            "identity_resolver.link_provider",
            identity_id=str(identity_id),
            provider=assertion.provider.value,
            trigger=event.trigger.value,
        ):
            invalid = _check_assertion(assertion)
            if invalid:
                return invalid

            try:
                identity = await self.identity_repository.find_by_id(identity_id)
                if identity is None:
                    logfire.warn("Identity not found", identity_id=str(identity_id))
                    return LinkFailure(
                        kind=LinkErrorKind.NOT_FOUND,
                        message=f"Identity not found: {identity_id}",
                    )

                if identity.is_bound_to(assertion.provider):
                    logfire.warn(
                        "Provider kind already bound to identity",
                        identity_id=str(identity_id),
                        provider=assertion.provider.value,
                    )
                    return LinkFailure(
                        kind=LinkErrorKind.ACCOUNT_ALREADY_LINKED,
                        message=(
                            f"Identity already has a {assertion.provider.value} account"
                        ),
                    )

                holder = await self.identity_repository.find_by_provider_binding(
                    assertion.provider, assertion.external_id
                )
                if holder is not None:
                    return _conflict(
                        ProviderBindingConflictError(
                            assertion.provider, assertion.external_id
                        )
                    )

                return await self._attach(identity, assertion, event)
            except ProviderBindingConflictError as e:
                return _conflict(e)
            except RepositoryUnavailableError as e:
                return _unavailable(e)

    async def _existing_login(
        self, identity: Identity, assertion: VerifiedProviderAssertion
    ) -> Resolution:
        refreshed = identity.with_refreshed_profile(assertion, self.clock.now())
        if refreshed is not identity:
            try:
                refreshed = await self.identity_repository.save(refreshed)
                self._mirror_profile_image(identity, refreshed)
            except Exception as e:
                # Profile refresh is best-effort
                logfire.warn(
                    "Profile refresh failed, continuing with stored profile",
                    identity_id=str(identity.id),
                    error=str(e),
                    error_type=type(e).__name__,
                    _exc_info=sys.exc_info(),
                )
                refreshed = identity

        logfire.info(
            "Existing login",
            identity_id=str(identity.id),
            provider=assertion.provider.value,
        )
        return Resolution(
            identity=refreshed,
            outcome=ResolutionOutcome.EXISTING_LOGIN,
            previous_role=identity.role,
        )

    async def _attach(
        self,
        identity: Identity,
        assertion: VerifiedProviderAssertion,
        event: PromotionEvent,
    ) -> Resolution:
        now = self.clock.now()
        linked = identity.with_binding(
            ProviderBinding(
                provider=assertion.provider,
                external_id=assertion.external_id,
                linked_at=now,
            ),
            now,
        )
        promotion = self.promotion_policy.apply(linked, event, now)
        saved = await self.identity_repository.save(promotion.identity)

        await self.linking_event_repository.append(
            LinkingEvent.record(
                saved,
                LinkingAction.LINKED,
                now,
                provider=assertion.provider,
                external_id=assertion.external_id,
                previous_role=promotion.previous_role,
            )
        )
        if promotion.changed:
            await self.linking_event_repository.append(
                LinkingEvent.record(
                    saved,
                    LinkingAction.PROMOTED,
                    now,
                    provider=assertion.provider,
                    external_id=assertion.external_id,
                    previous_role=promotion.previous_role,
                )
            )

        logfire.info(
            "Provider linked to identity",
            identity_id=str(saved.id),
            provider=assertion.provider.value,
            trigger=event.trigger.value,
            role=saved.role.value,
            promoted=promotion.changed,
        )
        return Resolution(
            identity=saved,
            outcome=ResolutionOutcome.ACCOUNT_LINKED,
            previous_role=promotion.previous_role,
        )

    async def _create(
        self, assertion: VerifiedProviderAssertion, platform: Platform
    ) -> Resolution:
        now = self.clock.now()
        identity = Identity.create(assertion, platform, now)

        # A creation-capable first binding already implies the elevated tier
        promotion = self.promotion_policy.apply(
            identity, PromotionEvent.provider_linked(assertion.provider), now
        )
        saved = await self.identity_repository.save(promotion.identity)

        await self.linking_event_repository.append(
            LinkingEvent.record(
                saved,
                LinkingAction.CREATED,
                now,
                provider=assertion.provider,
                external_id=assertion.external_id,
            )
        )
        if promotion.changed:
            await self.linking_event_repository.append(
                LinkingEvent.record(
                    saved,
                    LinkingAction.PROMOTED,
                    now,
                    provider=assertion.provider,
                    external_id=assertion.external_id,
                    previous_role=promotion.previous_role,
                )
            )
        if saved.profile_image_url:
            self.profile_image_mirror.schedule(saved.id, saved.profile_image_url)

        logfire.info(
            "Identity created",
            identity_id=str(saved.id),
            provider=assertion.provider.value,
            platform=platform.value,
            role=saved.role.value,
        )
        return Resolution(
            identity=saved,
            outcome=ResolutionOutcome.NEW_IDENTITY_CREATED,
            previous_role=saved.role,
        )

    def _mirror_profile_image(self, before: Identity, after: Identity) -> None:
        if after.profile_image_url and after.profile_image_url != before.profile_image_url:
            self.profile_image_mirror.schedule(after.id, after.profile_image_url)


def _check_assertion(assertion: VerifiedProviderAssertion) -> LinkFailure | None:
    if not assertion.external_id or not assertion.external_id.strip():
        logfire.warn(
            "Rejected assertion without external id",
            provider=assertion.provider.value,
        )
        return LinkFailure(
            kind=LinkErrorKind.INVALID_ASSERTION,
            message="Assertion is missing the provider account id",
        )
    return None


def _conflict(error: ProviderBindingConflictError) -> LinkFailure:
    logfire.warn(
        "Provider account already bound elsewhere",
        provider=error.provider.value,
        external_id=error.external_id,
    )
    return LinkFailure(kind=LinkErrorKind.ACCOUNT_ALREADY_LINKED, message=str(error))


def _unavailable(error: RepositoryUnavailableError) -> LinkFailure:
    logfire.error("Identity repository unavailable", error=str(error))
    return LinkFailure(kind=LinkErrorKind.REPOSITORY_UNAVAILABLE, message=str(error))
