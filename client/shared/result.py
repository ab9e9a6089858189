"""Result types for operations that report failure without raising.

Public auth operations return a ``Result`` so every caller has to look at
the failure branch:

    result = await session.login("me@example.com", "hunter22")
    match result:
        case Success(value=user):
            print(f"Welcome {user.username}")
        case Failure(error=failure):
            print(failure.message)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure[E]]
