"""Mock component providers and the test container.

Importing this package registers the mocks as subclasses of the
component bases, which is how ``get_provider`` finds them.
"""

from .code_store import MockCodeStoreProvider
from .container import build_test_container
from .media import MockMediaProvider
from .persistence import MockPersistenceProvider
from .verifiers import MockVerifiersProvider

__all__ = [
    "build_test_container",
    "MockCodeStoreProvider",
    "MockMediaProvider",
    "MockPersistenceProvider",
    "MockVerifiersProvider",
]
