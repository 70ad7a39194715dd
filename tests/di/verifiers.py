"""Mock verifier providers for testing."""

from dishka import Scope, provide

from tether.adapter.verifier import MockTokenVerifier
from tether.domain.service import AssertionVerifier
from tether.domain.value import ProviderKind
from tether.util.di.infrastructure.verifiers import VerifiersProvider


class MockVerifiersProvider(VerifiersProvider):
    """Verifiers that decode the credential instead of calling providers."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_verifiers(self) -> dict[ProviderKind, AssertionVerifier]:
        """Provide a mock verifier for every provider."""
        return {provider: MockTokenVerifier(provider) for provider in ProviderKind}
