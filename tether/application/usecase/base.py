"""Use case base class."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

from tether.domain.value import LinkFailure

RequestT = TypeVar("RequestT", bound=BaseModel)
ResponseT = TypeVar("ResponseT", bound=BaseModel)


class BaseUseCase(ABC, Generic[RequestT, ResponseT]):
    """A single application operation over domain services.

    Expected failures come back as a LinkFailure value; the HTTP layer
    turns them into error responses.
    """

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT | LinkFailure: ...
