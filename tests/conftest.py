"""Test configuration and fixtures."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from tether.adapter.media import MockProfileImageMirror
from tether.config import DeviceLoginSettings, PairingSettings
from tether.domain.model.identity import Identity
from tether.domain.service import (
    DeviceLoginCoordinator,
    IdentityResolver,
    IdentityService,
    PairingCoordinator,
    RolePromotionPolicy,
)
from tether.domain.value import (
    LinkFailure,
    Platform,
    ProviderKind,
    VerifiedProviderAssertion,
)
from tether.persistence.code_store import InMemoryCodeStore
from tether.persistence.repository.inmemory import (
    InMemoryIdentityRepository,
    InMemoryLinkingEventRepository,
)
from tether.util.clock import Clock

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


def make_assertion(
    provider: ProviderKind,
    external_id: str,
    email: str | None = None,
    display_name: str | None = None,
    profile_image_url: str | None = None,
) -> VerifiedProviderAssertion:
    """Build a verified assertion as a verifier would return it."""
    return VerifiedProviderAssertion(
        provider=provider,
        external_id=external_id,
        email=email,
        display_name=display_name,
        profile_image_url=profile_image_url,
    )


@dataclass
class LinkingWorld:
    """Domain services wired to in-memory collaborators and a fake clock.

    Used where tests need to move time, which the DI container's wall clock
    does not allow.
    """

    clock: FakeClock
    code_store: InMemoryCodeStore
    identities: InMemoryIdentityRepository
    events: InMemoryLinkingEventRepository
    mirror: MockProfileImageMirror
    resolver: IdentityResolver
    identity_service: IdentityService
    pairing: PairingCoordinator
    device_login: DeviceLoginCoordinator

    async def sign_in(
        self,
        provider: ProviderKind,
        external_id: str,
        platform: Platform = Platform.AR,
        email: str | None = None,
    ) -> Identity:
        resolution = await self.resolver.resolve(
            make_assertion(provider, external_id, email=email), platform
        )
        assert not isinstance(resolution, LinkFailure), resolution
        return resolution.identity


def build_world(
    pairing_settings: PairingSettings | None = None,
    device_login_settings: DeviceLoginSettings | None = None,
) -> LinkingWorld:
    """Wire the linking services by hand."""
    clock = FakeClock()
    code_store = InMemoryCodeStore(clock)
    identities = InMemoryIdentityRepository()
    events = InMemoryLinkingEventRepository()
    mirror = MockProfileImageMirror()
    policy = RolePromotionPolicy()
    resolver = IdentityResolver(
        identity_repository=identities,
        linking_event_repository=events,
        promotion_policy=policy,
        profile_image_mirror=mirror,
        clock=clock,
    )
    return LinkingWorld(
        clock=clock,
        code_store=code_store,
        identities=identities,
        events=events,
        mirror=mirror,
        resolver=resolver,
        identity_service=IdentityService(
            identity_repository=identities,
            linking_event_repository=events,
            promotion_policy=policy,
            clock=clock,
        ),
        pairing=PairingCoordinator(
            code_store=code_store,
            identity_repository=identities,
            identity_resolver=resolver,
            settings=pairing_settings or PairingSettings(),
            clock=clock,
        ),
        device_login=DeviceLoginCoordinator(
            code_store=code_store,
            identity_repository=identities,
            settings=device_login_settings or DeviceLoginSettings(),
            clock=clock,
        ),
    )
