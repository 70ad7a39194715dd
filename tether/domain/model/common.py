"""Base model for all domain entities."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for aggregates and entities.

    Instances are frozen. State changes produce new instances through
    ``model_copy(update=...)`` so every write is an explicit save.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )
