"""Provider access token verifiers.

Each verifier exchanges a client-supplied access token for the account's
profile at the provider's userinfo endpoint. A token the provider accepts is
proof of the account, so the returned profile becomes a verified assertion.
"""

from typing import Any

import httpx
import logfire

from tether.domain.error import VerificationFailedError
from tether.domain.service.verification_service import AssertionVerifier
from tether.domain.value import ProviderKind, VerifiedProviderAssertion


class ProviderTokenVerifier(AssertionVerifier):
    """Base class for provider verifiers.

    Provides type distinction for dependency injection.
    """

    provider: ProviderKind


class HttpProviderTokenVerifier(ProviderTokenVerifier):
    """Verifies a token by fetching the provider's userinfo document."""

    def __init__(self, userinfo_url: str, timeout: float) -> None:
        """Initialize verifier.

        Args:
            userinfo_url: Provider endpoint returning the token owner's profile
            timeout: Request timeout in seconds
        """
        self.userinfo_url = userinfo_url
        self.timeout = timeout

    async def verify(self, credential: str) -> VerifiedProviderAssertion:
        """Verify an access token with the provider.

        Raises:
            VerificationFailedError: If the token is rejected or the provider
                cannot be reached
        """
        if not credential:
            raise VerificationFailedError(self.provider, "Empty credential")

        profile = await self._fetch_profile(credential)
        try:
            return self._to_assertion(profile)
        except (KeyError, TypeError, ValueError) as e:
            logfire.error(
                "Unexpected provider profile",
                provider=self.provider.value,
                error=str(e),
            )
            raise VerificationFailedError(
                self.provider, "Malformed profile response"
            ) from e

    def _request_kwargs(self, credential: str) -> dict[str, Any]:
        return {"headers": {"Authorization": f"Bearer {credential}"}}

    async def _fetch_profile(self, credential: str) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.userinfo_url,
                    timeout=self.timeout,
                    **self._request_kwargs(credential),
                )
        except httpx.HTTPError as e:
            logfire.error(
                "Provider userinfo HTTP error",
                provider=self.provider.value,
                error=str(e),
            )
            raise VerificationFailedError(
                self.provider, f"Provider unreachable: {e}"
            ) from e

        if response.status_code != 200:
            logfire.warn(
                "Provider rejected credential",
                provider=self.provider.value,
                status_code=response.status_code,
                error=response.text,
            )
            raise VerificationFailedError(
                self.provider, f"Provider returned {response.status_code}"
            )

        return response.json()

    def _to_assertion(self, profile: dict[str, Any]) -> VerifiedProviderAssertion:
        raise NotImplementedError


class GoogleTokenVerifier(HttpProviderTokenVerifier):
    """Google OpenID Connect userinfo verifier."""

    provider = ProviderKind.GOOGLE

    def _to_assertion(self, profile: dict[str, Any]) -> VerifiedProviderAssertion:
        # Unverified addresses must never drive email-based linking
        email = profile.get("email") if profile.get("email_verified") else None
        return VerifiedProviderAssertion(
            provider=self.provider,
            external_id=str(profile["sub"]),
            email=email,
            display_name=profile.get("name"),
            profile_image_url=profile.get("picture"),
        )


class MetaTokenVerifier(HttpProviderTokenVerifier):
    """Meta (Quest) platform verifier."""

    provider = ProviderKind.META

    def _request_kwargs(self, credential: str) -> dict[str, Any]:
        return {
            "params": {
                "access_token": credential,
                "fields": "id,alias,display_name,email,profile_url",
            }
        }

    def _to_assertion(self, profile: dict[str, Any]) -> VerifiedProviderAssertion:
        return VerifiedProviderAssertion(
            provider=self.provider,
            external_id=str(profile["id"]),
            email=profile.get("email"),
            display_name=profile.get("display_name") or profile.get("alias"),
            profile_image_url=profile.get("profile_url"),
        )


class FacebookTokenVerifier(HttpProviderTokenVerifier):
    """Facebook Graph API verifier."""

    provider = ProviderKind.FACEBOOK

    def _request_kwargs(self, credential: str) -> dict[str, Any]:
        return {
            "params": {
                "access_token": credential,
                "fields": "id,name,email,picture.type(large)",
            }
        }

    def _to_assertion(self, profile: dict[str, Any]) -> VerifiedProviderAssertion:
        picture = (profile.get("picture") or {}).get("data") or {}
        return VerifiedProviderAssertion(
            provider=self.provider,
            external_id=str(profile["id"]),
            email=profile.get("email"),
            display_name=profile.get("name"),
            profile_image_url=picture.get("url"),
        )


class MockTokenVerifier(ProviderTokenVerifier):
    """Mock verifier for testing.

    The credential is the assertion itself, as ``external_id`` or
    ``external_id|email|display_name`` with empty parts allowed. A credential
    starting with ``invalid`` is rejected.
    """

    def __init__(self, provider: ProviderKind) -> None:
        self.provider = provider

    async def verify(self, credential: str) -> VerifiedProviderAssertion:
        """Return an assertion decoded from the credential."""
        if not credential or credential.startswith("invalid"):
            raise VerificationFailedError(self.provider, "Rejected by mock provider")

        external_id, email, display_name = (credential.split("|") + ["", ""])[:3]
        return VerifiedProviderAssertion(
            provider=self.provider,
            external_id=external_id,
            email=email or None,
            display_name=display_name or None,
            profile_image_url=f"https://example.com/{self.provider.value}/{external_id}.jpg",
        )
