"""Four-state container for values whose source of truth is remote.

A ``RemoteValue`` is exactly one of ``NotStarted``, ``Loading``, ``Success`` or
``Failure``. Instances are immutable; every transition builds a new one, and a
fresh load drops the previous payload until it resolves.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True)
class NotStarted:
    """Nothing has been requested yet."""


@dataclass(frozen=True)
class Loading:
    """A request is in flight."""


@dataclass(frozen=True)
class Success(Generic[T]):
    """The request resolved with a value."""
    value: T


@dataclass(frozen=True)
class Failure(Generic[E]):
    """The request failed with an error."""
    error: E


RemoteValue = Union[NotStarted, Loading, Success[T], Failure[E]]

_NOT_STARTED = NotStarted()
_LOADING = Loading()


def not_started() -> NotStarted:
    return _NOT_STARTED


def loading() -> Loading:
    return _LOADING


def success(value: T) -> Success[T]:
    return Success(value)


def failure(error: E) -> Failure[E]:
    return Failure(error)


def is_ready(value: Any) -> bool:
    return isinstance(value, Success)


def is_loading(value: Any) -> bool:
    return isinstance(value, Loading)


def is_not_started(value: Any) -> bool:
    return isinstance(value, NotStarted)


def is_failure(value: Any) -> bool:
    return isinstance(value, Failure)


def get_or_default(value: Any, fallback: T) -> T:
    """Return the payload of a ``Success`` or ``fallback`` for any other state."""
    if isinstance(value, Success):
        return value.value
    return fallback


def map_value(value: Any, fn: Callable[[T], U]) -> Any:
    """Apply ``fn`` to a ``Success`` payload; other states pass through untouched."""
    if isinstance(value, Success):
        return Success(fn(value.value))
    return value


def value_check(value: Any, predicate: Callable[[T], bool]) -> bool:
    """Run ``predicate`` against a ``Success`` payload, ``False`` otherwise."""
    if isinstance(value, Success):
        return bool(predicate(value.value))
    return False
