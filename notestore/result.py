"""
notestore — Result Values
==========================

What:  `Ok` / `Err` pair returned by every NoteStore operation.
How:   `Ok` wraps the value, `Err` wraps a NoteStoreError. Callers branch on
       `is_ok()` or call `unwrap()` to get the value (or re-raise the error).

Example:
    result = await store.save(note)
    if result.is_err():
        show_error(result.error.message)
"""

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from notestore.exceptions import NoteStoreError

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=NoteStoreError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying `value` (None for operations with no value)."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: U) -> Union[T, U]:
        return self.value

    @property
    def error(self) -> None:
        return None


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying the error that ended the operation."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise self.error

    def unwrap_or(self, default: U) -> U:
        return default

    @property
    def message(self) -> str:
        return self.error.message


Result = Union[Ok[T], Err[E]]
