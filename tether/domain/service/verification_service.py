"""Provider assertion verification domain service."""

import logfire

from tether.domain.error import VerificationFailedError
from tether.domain.value import (
    LinkErrorKind,
    LinkFailure,
    ProviderKind,
    VerifiedProviderAssertion,
)

from .base import Service


class AssertionVerifier:
    """Verifies a raw credential with one provider."""

    async def verify(self, credential: str) -> VerifiedProviderAssertion:
        """Verify a provider credential.

        Args:
            credential: Raw credential issued by the provider (e.g. access token)

        Returns:
            Verified identity information

        Raises:
            VerificationFailedError: If the provider rejects the credential
        """
        raise NotImplementedError


class VerificationService(Service):
    """Dispatches credential verification to the verifier for each provider."""

    def __init__(self, verifiers: dict[ProviderKind, AssertionVerifier]) -> None:
        """Initialize verification service.

        Args:
            verifiers: Map of provider kind to verifier implementation
        """
        self.verifiers = verifiers

    async def verify(
        self, provider: ProviderKind, credential: str
    ) -> VerifiedProviderAssertion | LinkFailure:
        """Verify a credential for a provider.

        Args:
            provider: Provider the credential was issued by
            credential: Raw provider credential

        Returns:
            The verified assertion, or a VERIFICATION_FAILED failure
        """
        with logfire.span("verification_service.verify", provider=provider.value):
            verifier = self.verifiers.get(provider)
            if verifier is None:
                logfire.error("No verifier configured", provider=provider.value)
                return LinkFailure(
                    kind=LinkErrorKind.VERIFICATION_FAILED,
                    message=f"Unsupported provider: {provider.value}",
                )

            try:
                assertion = await verifier.verify(credential)
            except VerificationFailedError as e:
                logfire.warn(
                    "Provider verification failed",
                    provider=provider.value,
                    reason=e.reason,
                )
                return LinkFailure(
                    kind=LinkErrorKind.VERIFICATION_FAILED, message=str(e)
                )

            if assertion.provider != provider:
                logfire.error(
                    "Verifier returned assertion for another provider",
                    expected=provider.value,
                    actual=assertion.provider.value,
                )
                return LinkFailure(
                    kind=LinkErrorKind.VERIFICATION_FAILED,
                    message="Provider mismatch in verified assertion",
                )

            logfire.info(
                "Provider credential verified",
                provider=provider.value,
                external_id=assertion.external_id,
            )
            return assertion
