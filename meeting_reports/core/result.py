# meeting_reports/core/result.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """
    Successful outcome carrying a value.
    """

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """
    Failed outcome carrying the exception that describes it.

    The exception is returned, not raised, so the caller (usually the HTTP
    layer) decides how to surface it.
    """

    error: Exception

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.error)


Result = Union[Ok[T], Err]
