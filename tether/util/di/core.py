"""Settings and clock providers.

Every section is APP-scoped: settings are read from the environment
once per container.
"""

from dishka import Scope, provide

from tether.config import AuthSettings, DeviceLoginSettings, PairingSettings, Settings
from tether.util.clock import Clock
from tether.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Configuration sections and the wall clock."""

    scope = Scope.APP

    @provide
    def settings(self) -> Settings:
        return Settings()

    @provide
    def auth(self, settings: Settings) -> AuthSettings:
        return settings.auth

    @provide
    def pairing(self, settings: Settings) -> PairingSettings:
        return settings.pairing

    @provide
    def device_login(self, settings: Settings) -> DeviceLoginSettings:
        return settings.device_login

    @provide
    def clock(self) -> Clock:
        return Clock()
