"""Success/failure result type returned by every API call.

``Result[T]`` is either ``Success(value)`` or ``Failure(error)``. Callers are
expected to branch on it (``isinstance``, ``match`` or ``fold``) rather than
catch exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from navee_api.errors import ApiError, map_exception

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A call that produced a value."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    @property
    def value_or_none(self) -> T | None:
        return self.value

    @property
    def error_or_none(self) -> ApiError | None:
        return None

    def map(self, fn: Callable[[T], R]) -> Result[R]:
        return Success(fn(self.value))

    def fold(
        self,
        *,
        on_success: Callable[[T], R],
        on_failure: Callable[[ApiError], R],
    ) -> R:
        return on_success(self.value)

    async def when(
        self,
        *,
        success: Callable[[T], Awaitable[R]],
        failure: Callable[[ApiError], Awaitable[R]],
    ) -> R:
        return await success(self.value)

    def get_or_else(self, fn: Callable[[ApiError], T]) -> T:
        return self.value

    def get_or_raise(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Success({self.value!r})"


@dataclass(frozen=True)
class Failure:
    """A call that failed; ``error`` says why."""

    error: ApiError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    @property
    def value_or_none(self) -> None:
        return None

    @property
    def error_or_none(self) -> ApiError:
        return self.error

    def map(self, fn: Callable[[object], object]) -> Failure:
        return self

    def fold(
        self,
        *,
        on_success: Callable[[object], R],
        on_failure: Callable[[ApiError], R],
    ) -> R:
        return on_failure(self.error)

    async def when(
        self,
        *,
        success: Callable[[object], Awaitable[R]],
        failure: Callable[[ApiError], Awaitable[R]],
    ) -> R:
        return await failure(self.error)

    def get_or_else(self, fn: Callable[[ApiError], R]) -> R:
        return fn(self.error)

    def get_or_raise(self) -> NoReturn:
        raise self.error

    def __repr__(self) -> str:
        return f"Failure({self.error.safe_message!r})"


Result = Union[Success[T], Failure]


def guard(fn: Callable[[], T]) -> Result[T]:
    """Run ``fn`` and wrap its outcome, mapping raised exceptions to Failure."""
    try:
        return Success(fn())
    except Exception as exc:
        logger.debug("Guarded call failed: %s", exc)
        return Failure(map_exception(exc))


async def guard_async(fn: Callable[[], Awaitable[T]]) -> Result[T]:
    """Await ``fn()`` and wrap its outcome, mapping raised exceptions to Failure."""
    try:
        return Success(await fn())
    except Exception as exc:
        logger.debug("Guarded call failed: %s", exc)
        return Failure(map_exception(exc))
