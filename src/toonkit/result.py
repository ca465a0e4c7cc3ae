"""Result type for explicit error handling."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import ToonError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of an encode or decode call: a value or a structured error.

    A successful result may legitimately hold ``None`` (the TOON ``null``),
    so success is decided by the absence of an error, not by the data.

    Examples:
        result = try_decode("name: Alice")
        if result.success:
            print(result.data)
        else:
            print(result.error.reason)

        # Raise the stored error if the call failed
        data = result.unwrap()
    """

    data: T | None = None
    error: ToonError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def is_ok(self) -> bool:
        """Check if result is successful."""
        return self.error is None

    def is_err(self) -> bool:
        """Check if result is failed."""
        return self.error is not None

    def unwrap(self) -> T:
        """
        Return the data, raising the stored error if the call failed.

        Raises:
            ToonError: The structured error the call produced.
        """
        if self.error is not None:
            raise self.error
        return self.data  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        """Return the data, or ``default`` if the call failed."""
        if self.error is not None:
            return default
        return self.data  # type: ignore[return-value]

    def unwrap_or_else(self, func: Callable[[ToonError], T]) -> T:
        """Return the data, or compute a fallback from the error."""
        if self.error is not None:
            return func(self.error)
        return self.data  # type: ignore[return-value]

    def map(self, func: Callable[[T], Any]) -> "Result[Any]":
        """Apply ``func`` to the data of a successful result."""
        if self.error is not None:
            return Result(error=self.error)
        return Result(data=func(self.data))  # type: ignore[arg-type]

    def and_then(self, func: Callable[[T], "Result[Any]"]) -> "Result[Any]":
        """Chain a Result-returning function onto a successful result."""
        if self.error is not None:
            return Result(error=self.error)
        return func(self.data)  # type: ignore[arg-type]

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        """Create a successful result."""
        return cls(data=data)

    @classmethod
    def err(cls, error: ToonError) -> "Result[T]":
        """Create a failed result."""
        return cls(error=error)

    def __repr__(self) -> str:
        if self.error is None:
            return f"Result.ok({self.data!r})"
        return f"Result.err({self.error!r})"

    def __bool__(self) -> bool:
        """Allow using Result in boolean context (checks success)."""
        return self.error is None
