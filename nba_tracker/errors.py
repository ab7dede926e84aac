# nba_tracker/errors.py
"""
Error taxonomy and the Result wrapper returned by the wire client.

The client never lets a transport exception escape: every fetch returns a
Result that either carries a value or one of the ApiError subclasses below.
A cache-only miss is not an error; it is a successful Result holding None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class ApiError(Exception):
    """Base class for failures surfaced by the wire client."""


class NetworkError(ApiError):
    """Transport-level failure: DNS, connection refused, timeout, etc."""


class HttpError(ApiError):
    """The server answered with a non-2xx status."""

    def __init__(self, code: int, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(f"HTTP {code}: {message}" if message else f"HTTP {code}")


class DecodeError(ApiError):
    """The body was not JSON, or lacked the top-level container we need."""


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an ApiError, never both."""

    value: Optional[T] = None
    error: Optional[ApiError] = None

    @classmethod
    def success(cls, value: Optional[T]) -> "Result[T]":
        return cls(value=value, error=None)

    @classmethod
    def failure(cls, error: ApiError) -> "Result[T]":
        return cls(value=None, error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    def get_or_none(self) -> Optional[T]:
        """Return the value, or None on failure."""
        return self.value if self.error is None else None

    def map(self, fn: Callable[[Optional[T]], U]) -> "Result[U]":
        """
        Transform a successful value.

        An ApiError raised by fn becomes a failure; failures pass through untouched.
        """
        if self.error is not None:
            return Result.failure(self.error)
        try:
            return Result.success(fn(self.value))
        except ApiError as exc:
            return Result.failure(exc)

    @property
    def message(self) -> str:
        """Human-readable error text (empty on success)."""
        if self.error is None:
            return ""
        return str(self.error) or type(self.error).__name__
