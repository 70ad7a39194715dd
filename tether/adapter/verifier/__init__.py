"""Provider credential verifiers."""

from .client import (
    FacebookTokenVerifier,
    GoogleTokenVerifier,
    HttpProviderTokenVerifier,
    MetaTokenVerifier,
    MockTokenVerifier,
    ProviderTokenVerifier,
)

__all__ = [
    "FacebookTokenVerifier",
    "GoogleTokenVerifier",
    "HttpProviderTokenVerifier",
    "MetaTokenVerifier",
    "MockTokenVerifier",
    "ProviderTokenVerifier",
]
