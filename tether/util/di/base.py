"""Provider base class and component metadata."""

from typing import ClassVar, Literal, get_args

from dishka import Provider

Component = Literal["persistence", "code_store", "verifiers", "media"]

# Every component name that has a prod/mock pair
COMPONENTS: frozenset[Component] = frozenset(get_args(Component))


class ProviderBase(Provider):
    """Provider with swap metadata.

    A component base sets ``__mock_component__``; its implementations
    subclass it and set ``__is_mock__``.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
