"""Infrastructure providers."""

# Import bases
from .code_store import CodeStoreProvider
from .media import MediaProvider
from .persistence import PersistenceProvider
from .verifiers import VerifiersProvider

# Import implementations (needed for __subclasses__())
from .code_store import ProdCodeStoreProvider  # noqa: F401
from .media import ProdMediaProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401
from .verifiers import ProdVerifiersProvider  # noqa: F401

__all__ = [
    "CodeStoreProvider",
    "MediaProvider",
    "PersistenceProvider",
    "ProdCodeStoreProvider",
    "ProdMediaProvider",
    "ProdPersistenceProvider",
    "ProdVerifiersProvider",
    "VerifiersProvider",
]
