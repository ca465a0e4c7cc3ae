"""Type definitions for the TOON encoder/decoder."""

from dataclasses import dataclass, field
from typing import Literal

# Canonical value tree
JsonPrimitive = str | int | float | bool | None
JsonArray = list["JsonValue"]
JsonObject = dict[str, "JsonValue"]
JsonValue = JsonPrimitive | JsonArray | JsonObject

# Delimiter options
Delimiter = Literal[",", "\t", "|"]

DELIMITERS: tuple[str, ...] = (",", "\t", "|")

# An encoded line and its depth relative to the block it belongs to
Line = tuple[str, int]


@dataclass(frozen=True)
class ParsedLine:
    """A source line with indentation info."""

    raw: str
    """Original line content."""

    content: str
    """Content after stripping indentation and trailing whitespace."""

    indent: int
    """Number of leading spaces."""

    depth: int
    """Indentation level (indent // indent_size)."""

    line_number: int
    """1-based line number."""

    @property
    def is_blank(self) -> bool:
        return not self.content

    @property
    def column(self) -> int:
        """1-based column where the content starts."""
        return self.indent + 1


@dataclass(frozen=True)
class ArrayHeaderInfo:
    """Parsed array header information."""

    key: str | None
    """Decoded key, or None for keyless (root or list item) headers."""

    length: int
    """Declared array length."""

    delimiter: Delimiter = ","
    """Delimiter for this array's values."""

    fields: list[str] = field(default_factory=list)
    """Field names for tabular format (empty for non-tabular)."""

    rest: str = ""
    """Text after the header colon (inline values), stripped."""

    @property
    def is_tabular(self) -> bool:
        return bool(self.fields)
