"""Primitive value encoding and parsing for TOON."""

import math
import re
from decimal import Decimal
from typing import TYPE_CHECKING

from .errors import DecodeError, EncodeError, ErrorReason
from .string_utils import encode_key, needs_quoting, quote, split_by_delimiter, unquote_and_unescape

if TYPE_CHECKING:
    from .types import Delimiter, JsonPrimitive

# Leading zeros disqualify numeric interpretation ("05" stays a string)
NUMBER_PATTERN = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?", re.ASCII)

LITERALS: dict[str, "JsonPrimitive"] = {"null": None, "true": True, "false": False}


def encode_primitive(value: "JsonPrimitive", delimiter: "Delimiter" = ",") -> str:
    """
    Encode a primitive value to TOON format.

    Args:
        value: None, a bool, an int, a float or a str.
        delimiter: The active delimiter for quoting checks.

    Returns:
        The encoded token.

    Raises:
        EncodeError: If the value is not a canonical primitive.
    """
    if isinstance(value, str):
        return encode_string_literal(value, delimiter)
    # bool is an int subclass, so it has to be matched first
    if value is None or isinstance(value, bool):
        return {None: "null", True: "true", False: "false"}[value]
    if isinstance(value, (int, float)):
        return format_number(value)

    raise EncodeError(f"Cannot encode value of type {type(value).__name__}", value=value)


def format_number(value: int | float) -> str:
    """
    Encode a number to TOON format.

    Integers and whole floats render without a decimal point, other floats
    use the shortest text that reads back to the same value, never in
    scientific notation. NaN and infinities have no TOON form and become null.
    """
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        return "null"
    if value.is_integer():
        # Covers -0.0 too
        return str(int(value))

    text = repr(value)
    if "e" in text:
        text = format(Decimal(text), "f")
    return text


def encode_string_literal(value: str, delimiter: "Delimiter" = ",") -> str:
    """Encode a string, quoting it only when it would not read back as itself."""
    return quote(value) if needs_quoting(value, delimiter) else value


def parse_primitive(token: str) -> "JsonPrimitive":
    """
    Parse a stripped primitive token.

    An empty token is the empty string, a quoted token is unescaped, and
    bare tokens are tried as null/true/false, then as a number, and
    otherwise kept as text.

    Raises:
        DecodeError: For malformed quoted strings.
    """
    if token.startswith('"'):
        return unquote_and_unescape(token)
    if token in LITERALS:
        return LITERALS[token]

    number = _parse_number(token)
    return token if number is None else number


def _parse_number(token: str) -> int | float | None:
    if not NUMBER_PATTERN.fullmatch(token):
        return None

    if token.isdigit() or (token[0] == "-" and token[1:].isdigit()):
        # int("-0") is already 0
        return int(token)

    value = float(token)
    if math.isinf(value):
        # Overflowing literals have no canonical form; keep the text
        return None
    # -0.0 reads as 0
    return 0 if value == 0 else value


def parse_delimited(values: str, delimiter: "Delimiter" = ",") -> list["JsonPrimitive"]:
    """
    Split a delimited value list and parse every token.

    Delimiters inside quoted tokens are literal, so
    ``parse_delimited('a,"b,c",d')`` gives ``["a", "b,c", "d"]``.
    """
    return [parse_primitive(token) for token in split_by_delimiter(values, delimiter)]


def parse_value_token(token: str) -> "JsonPrimitive":
    """
    Parse the value half of a ``key: value`` line.

    Unlike array tokens, a bare field value may not contain another
    unquoted colon; ``a: : b`` is malformed rather than the string ``": b"``.
    """
    if not token.startswith('"') and ":" in token:
        raise DecodeError(f"Unexpected ':' in value: {token}", ErrorReason.UNEXPECTED_LINE)
    return parse_primitive(token)


def format_array_header(
    length: int,
    key: str | None = None,
    fields: list[str] | None = None,
    delimiter: "Delimiter" = ",",
    length_marker: str | None = None,
) -> str:
    """
    Format an array header line, e.g. ``users[#2|]{age|name}:``.

    Args:
        length: Number of elements.
        key: Field name, or None for root arrays and arrays inside lists.
        fields: Column names of a tabular array.
        delimiter: Active delimiter; tab and pipe are written inside the
            brackets so a reader can recover them.
        length_marker: Optional prefix for the count, e.g. "#".
    """
    prefix = encode_key(key) if key is not None else ""
    bracket = f"[{length_marker or ''}{length}{'' if delimiter == ',' else delimiter}]"
    columns = "{" + delimiter.join(map(encode_key, fields)) + "}" if fields else ""
    return f"{prefix}{bracket}{columns}:"
