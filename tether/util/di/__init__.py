"""Dependency injection wiring.

``PROVIDERS`` lists one entry per concern. Core providers are used as-is;
infrastructure components are bases whose subclasses are the real and
mock implementations, chosen by ``get_provider``.
"""

from typing import Type

from tether.util.di.application import ProdApplicationProvider
from tether.util.di.base import COMPONENTS, Component, ProviderBase
from tether.util.di.core import ProdConfigProvider
from tether.util.di.domain import ProdDomainProvider
from tether.util.di.infrastructure import (
    CodeStoreProvider,
    MediaProvider,
    PersistenceProvider,
    ProdCodeStoreProvider,
    ProdMediaProvider,
    ProdPersistenceProvider,
    ProdVerifiersProvider,
    VerifiersProvider,
)

PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    PersistenceProvider,
    CodeStoreProvider,
    VerifiersProvider,
    MediaProvider,
]


def is_swappable(base: Type[ProviderBase]) -> bool:
    """Whether a provider base has real and mock implementations."""
    return base.__mock_component__ is not None


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Pick the implementation of a provider base.

    Mock implementations live in tests/di and only register as subclasses
    once that package is imported.

    Raises:
        ValueError: If the component has no implementation of that kind
    """
    if not is_swappable(base):
        return base

    by_kind = {impl.__is_mock__: impl for impl in base.__subclasses__()}
    if use_mock not in by_kind:
        kind = "mock" if use_mock else "production"
        raise ValueError(f"No {kind} implementation for {base.__mock_component__}")
    return by_kind[use_mock]


__all__ = [
    "COMPONENTS",
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "is_swappable",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "CodeStoreProvider",
    "MediaProvider",
    "PersistenceProvider",
    "VerifiersProvider",
    "ProdCodeStoreProvider",
    "ProdMediaProvider",
    "ProdPersistenceProvider",
    "ProdVerifiersProvider",
]
