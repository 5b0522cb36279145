"""Tagged task outcome: Success(data) or Failure(error).

A trimmed Result/Either for task outcomes. Every task a runner drives ends
in exactly one TaskResult, which aggregators inspect and optionally return
as-is when called with ``structured=True``.

Example:
    >>> wrap_result(None, 1, 2)
    Success([1, 2])
    >>> wrap_result(ValueError("boom")).is_err()
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar, cast

if TYPE_CHECKING:
    from collections.abc import Iterator

T = TypeVar("T")  # Data type
U = TypeVar("U")  # Mapped data type


class TaskResult(Generic[T]):
    """Discriminated union of a task's data or its error.

    The error side is untyped: tasks usually fail with exceptions, but a
    callback-style task may signal any truthy value as its error.

    Examples:
        >>> Success(42).map(lambda x: x * 2).unwrap()
        84
        >>> Failure("nope").unwrap_or(0)
        0
    """

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)

    def __init__(self, value: T | object, is_ok: bool) -> None:
        """Private constructor. Use Success() or Failure() instead."""
        self._value = value
        self._is_ok = is_ok

    # ─────────────────────────────────────────────────────────────────
    # Type Checking
    # ─────────────────────────────────────────────────────────────────

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    # ─────────────────────────────────────────────────────────────────
    # Value Extraction
    # ─────────────────────────────────────────────────────────────────

    @property
    def data(self) -> T | None:
        """Task data, or None for a failure."""
        return cast(T, self._value) if self._is_ok else None

    @property
    def error(self) -> object | None:
        """Task error, or None for a success."""
        return None if self._is_ok else self._value

    def unwrap(self) -> T:
        """Extract data, raise the task error on Failure.

        Raises:
            BaseException: The stored error if it is an exception
            RuntimeError: If the stored error is not an exception
        """
        if self._is_ok:
            return cast(T, self._value)
        if isinstance(self._value, BaseException):
            raise self._value
        raise RuntimeError(f"Called unwrap() on Failure value: {self._value!r}")

    def unwrap_err(self) -> object:
        """Extract error, panic on Success.

        Raises:
            RuntimeError: If result is a Success
        """
        if not self._is_ok:
            return self._value
        raise RuntimeError(f"Called unwrap_err() on Success value: {self._value!r}")

    def unwrap_or(self, default: T) -> T:
        return cast(T, self._value) if self._is_ok else default

    # ─────────────────────────────────────────────────────────────────
    # Functor Operations
    # ─────────────────────────────────────────────────────────────────

    def map(self, f: Callable[[T], U]) -> TaskResult[U]:
        """Apply f to the data of a Success, pass a Failure through."""
        if self._is_ok:
            return Success(f(cast(T, self._value)))
        return Failure(self._value)

    def map_err(self, f: Callable[[object], object]) -> TaskResult[T]:
        """Apply f to the error of a Failure, pass a Success through."""
        if not self._is_ok:
            return Failure(f(self._value))
        return self

    def match(
        self,
        *,
        ok: Callable[[T], U],
        err: Callable[[object], U],
    ) -> U:
        """Exhaustive case analysis over both variants.

        Example:
            >>> Failure("x").match(ok=str, err=lambda e: f"failed: {e}")
            'failed: x'
        """
        if self._is_ok:
            return ok(cast(T, self._value))
        return err(self._value)

    # ─────────────────────────────────────────────────────────────────
    # Conversion
    # ─────────────────────────────────────────────────────────────────

    def to_tuple(self) -> tuple[object | None, T | None]:
        """Convert to the ``(error, data)`` pair a side-channel handler receives."""
        return (self.error, self.data)

    # ─────────────────────────────────────────────────────────────────
    # Dunder Methods
    # ─────────────────────────────────────────────────────────────────

    def __bool__(self) -> bool:
        return self._is_ok

    def __repr__(self) -> str:
        variant = "Success" if self._is_ok else "Failure"
        return f"{variant}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaskResult):
            return NotImplemented
        return self._is_ok == other._is_ok and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._is_ok, self._value))

    def __iter__(self) -> Iterator[T]:
        """Yield the data of a Success, nothing for a Failure."""
        if self._is_ok:
            yield cast(T, self._value)


# ═════════════════════════════════════════════════════════════════════════════
# Constructor Functions
# ═════════════════════════════════════════════════════════════════════════════


def Success(data: T) -> TaskResult[T]:  # noqa: N802
    """Construct a successful outcome."""
    return TaskResult(data, is_ok=True)


def Failure(error: object) -> TaskResult[T]:  # noqa: N802
    """Construct a failed outcome."""
    return TaskResult(error, is_ok=False)


def wrap_result(error: object = None, *values: object) -> TaskResult[object]:
    """Normalize a raw task outcome into a TaskResult.

    A truthy error wins. Otherwise zero values give ``Success(None)``, one
    value gives ``Success(value)`` and several values are collapsed into a
    list in the order they were produced.
    """
    if error:
        return Failure(error)
    match len(values):
        case 0: return Success(None)
        case 1: return Success(values[0])
        case _: return Success(list(values))
