"""Exception types for TOON encoding and decoding."""

from enum import Enum
from typing import Any


class ErrorReason(str, Enum):
    """Machine-readable failure codes carried by every TOON error."""

    INVALID_OPTIONS = "invalid_options"
    UNSUPPORTED_VALUE = "unsupported_value"
    CIRCULAR_REFERENCE = "circular_reference"
    INDENTATION = "indentation"
    BLANK_LINE = "blank_line"
    UNEXPECTED_LINE = "unexpected_line"
    LENGTH_MISMATCH = "length_mismatch"
    INVALID_ESCAPE = "invalid_escape"
    UNTERMINATED_STRING = "unterminated_string"
    DUPLICATE_KEY = "duplicate_key"
    UNKNOWN_KEY = "unknown_key"


class ToonError(Exception):
    """Base exception with a reason code and structured details."""

    def __init__(
        self,
        message: str,
        reason: ErrorReason,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the error.

        Args:
            message: Human-readable description of the failure.
            reason: Machine-readable failure code.
            details: Additional context for structured logging.
        """
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "reason": self.reason.value,
            "details": self.details,
        }


class OptionsError(ToonError, ValueError):
    """Raised when encode or decode options fail validation."""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = dict(details or {})
        if field:
            details["field"] = field

        super().__init__(message, ErrorReason.INVALID_OPTIONS, details)
        self.field = field


class EncodeError(ToonError, TypeError):
    """Raised when a value cannot be encoded."""

    def __init__(
        self,
        message: str,
        reason: ErrorReason = ErrorReason.UNSUPPORTED_VALUE,
        value: Any = None,
        path: str | None = None,
    ):
        details: dict[str, Any] = {}
        if value is not None:
            details["value_type"] = type(value).__name__
        if path:
            details["path"] = path

        super().__init__(message, reason, details)
        self.value = value
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (at {self.path})"
        return self.message


class DecodeError(ToonError, ValueError):
    """
    Raised when TOON text cannot be decoded.

    Errors that originate from a specific source line carry its 1-based
    ``line`` and ``column`` plus a ``context`` snippet showing the line.
    """

    def __init__(
        self,
        message: str,
        reason: ErrorReason,
        line: int | None = None,
        column: int | None = None,
        context: str | None = None,
    ):
        details: dict[str, Any] = {}
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column

        super().__init__(message, reason, details)
        self.line = line
        self.column = column
        self.context = context

    def __str__(self) -> str:
        text = self.message
        if self.line is not None and self.column is not None:
            text += f" at line {self.line}, column {self.column}"
        elif self.line is not None:
            text += f" at line {self.line}"
        elif self.column is not None:
            text += f" at column {self.column}"
        if self.context:
            text += f"\n\nContext:\n{self.context}"
        return text

    def at(self, line: int, column: int | None, context: str | None) -> "DecodeError":
        """Return a copy of a location-less error pinned to a source line."""
        return DecodeError(self.message, self.reason, line=line, column=column, context=context)


def format_context(text: str, line: int, column: int | None = None) -> str:
    """
    Render a one-line context snippet with an optional caret.

    Args:
        text: The raw source line.
        line: 1-based line number.
        column: 1-based column to mark, if known.

    Returns:
        The snippet, e.g. ``"  3 | key: value"`` followed by a caret line.
    """
    gutter = f"{line:>3} | "
    snippet = gutter + text
    if column is not None:
        snippet += "\n" + " " * (len(gutter) + column - 1) + "^"
    return snippet
