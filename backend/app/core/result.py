"""
Tagged result values returned by the pre-commit hooks.

A hook either produces a fully normalized record or the first error it hit,
never a partially valid object:

    result = normalize_event(write)
    if isinstance(result, Failure):
        raise result.error
    record = result.value
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure(Generic[E]):
    error: E


Result = Union[Success[T], Failure[E]]
