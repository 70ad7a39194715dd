"""Provider verifier infrastructure providers."""

from dishka import Scope, provide

from tether.adapter.verifier import (
    FacebookTokenVerifier,
    GoogleTokenVerifier,
    MetaTokenVerifier,
)
from tether.config import Settings
from tether.domain.service import AssertionVerifier
from tether.domain.value import ProviderKind
from tether.util.di.base import ProviderBase


class VerifiersProvider(ProviderBase):
    """Verifiers component base."""

    __mock_component__ = "verifiers"


class ProdVerifiersProvider(VerifiersProvider):
    """Production verifiers calling each provider's userinfo endpoint."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_verifiers(self, settings: Settings) -> dict[ProviderKind, AssertionVerifier]:
        """Provide dictionary of verifiers by provider.

        Every ProviderKind must have an entry.
        """
        auth = settings.auth
        timeout = auth.request_timeout_seconds
        return {
            ProviderKind.GOOGLE: GoogleTokenVerifier(auth.google.userinfo_url, timeout),
            ProviderKind.META: MetaTokenVerifier(auth.meta.userinfo_url, timeout),
            ProviderKind.FACEBOOK: FacebookTokenVerifier(
                auth.facebook.userinfo_url, timeout
            ),
        }
