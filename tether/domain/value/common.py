"""Base class for value objects."""

from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Immutable object compared by value.

    Bindings, assertions, promotion events and failures are all value objects:
    two instances with equal fields are interchangeable.
    """

    model_config = ConfigDict(frozen=True)
