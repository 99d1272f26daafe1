"""Explicit success/failure results for loaders that must not raise."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from npsdesk.core.exceptions import EntitlementError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error: EntitlementError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure]
