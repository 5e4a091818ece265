"""Success/failure envelope returned by every entity handler."""

from typing import Generic, Literal, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T")


class XeroSuccess(BaseModel, Generic[T]):
    """A remote call that produced a result."""

    result: T
    is_error: Literal[False] = False


class XeroFailure(BaseModel):
    """A remote call that failed; ``error`` is ready to show to a user."""

    error: str
    is_error: Literal[True] = True


XeroClientResponse = Union[XeroSuccess, XeroFailure]
