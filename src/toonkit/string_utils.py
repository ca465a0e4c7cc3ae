"""Quoting, escaping and quote-aware scanning of TOON text."""

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from .errors import DecodeError, ErrorReason

if TYPE_CHECKING:
    from .types import Delimiter

# The complete escape table; anything else after a backslash is invalid
ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

UNESCAPES = {escaped[1]: char for char, escaped in ESCAPES.items()}

_ESCAPE_PATTERN = re.compile(r'[\\"\n\r\t]')
_UNESCAPE_PATTERN = re.compile(r"\\(.?)", re.DOTALL)

RESERVED_LITERALS = frozenset({"true", "false", "null"})

STRUCTURAL_CHARS = frozenset(':,[]{}()"\\')

LIST_ITEM_MARKER = "-"

# Anything shaped like a number, leading zeros included ("05" must stay a string)
NUMBER_LIKE_PATTERN = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?", re.ASCII)

BARE_KEY_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*")


def escape_string(value: str) -> str:
    """Escape backslash, double quote, newline, carriage return and tab."""
    return _ESCAPE_PATTERN.sub(lambda m: ESCAPES[m.group()], value)


def unescape_string(value: str) -> str:
    """
    Reverse ``escape_string`` for the text between a pair of quotes.

    Raises:
        DecodeError: On an unknown escape or a lone trailing backslash.
    """

    def replace(match: re.Match) -> str:
        char = match.group(1)
        if not char:
            raise DecodeError("Backslash at end of string", ErrorReason.INVALID_ESCAPE)
        if char not in UNESCAPES:
            raise DecodeError(f"Invalid escape sequence: \\{char}", ErrorReason.INVALID_ESCAPE)
        return UNESCAPES[char]

    return _UNESCAPE_PATTERN.sub(replace, value)


def quote(value: str) -> str:
    """Wrap a string in double quotes, escaping its contents."""
    return f'"{escape_string(value)}"'


def scan(text: str) -> Iterator[tuple[int, str, bool]]:
    """
    Walk ``text`` yielding ``(index, char, quoted)`` for every character.

    ``quoted`` is True for characters inside a double-quoted section,
    including the quote characters themselves. An escape pair inside
    quotes is yielded as one two-character item so an escaped quote never
    toggles the state.
    """
    quoted = False
    i = 0
    while i < len(text):
        char = text[i]
        if char == '"':
            yield i, char, True
            quoted = not quoted
            i += 1
        elif quoted and char == "\\" and i + 1 < len(text):
            yield i, text[i : i + 2], True
            i += 2
        else:
            yield i, char, quoted
            i += 1


def find_closing_quote(text: str, start: int = 0) -> int:
    """Index of the quote closing the one at ``start``, or -1."""
    for i, char, _ in scan(text[start:]):
        if char == '"' and i > 0:
            return start + i
    return -1


def unquote_and_unescape(token: str) -> str:
    """
    Decode a complete quoted token such as ``"a\\tb"``.

    Raises:
        DecodeError: If the token is unterminated, has trailing text after
            the closing quote, or contains an invalid escape.
    """
    if not token.startswith('"'):
        raise DecodeError(f"Expected quoted string: {token}", ErrorReason.UNEXPECTED_LINE)

    end = find_closing_quote(token)
    if end == -1:
        raise DecodeError(f"Unterminated string: {token}", ErrorReason.UNTERMINATED_STRING)

    trailing = token[end + 1 :].strip()
    if trailing:
        raise DecodeError(f"Unexpected characters after closing quote: {trailing}", ErrorReason.UNEXPECTED_LINE)
    return unescape_string(token[1:end])


def is_number_like(value: str) -> bool:
    """Check if a string would read back as a number, leading zeros included."""
    return NUMBER_LIKE_PATTERN.fullmatch(value) is not None


def has_control_chars(value: str) -> bool:
    """Check for C0 control characters or DEL, none of which may appear bare."""
    return any(c < " " or c == "\x7f" for c in value)


def needs_quoting(value: str, delimiter: "Delimiter" = ",") -> bool:
    """
    Check if a string must be quoted to read back unchanged.

    True for empty strings, surrounding whitespace, ``true``/``false``/``null``,
    number-like text (``05`` included), structural or control characters,
    the active delimiter, and a leading ``-``.
    """
    return (
        not value
        or value != value.strip()
        or value in RESERVED_LITERALS
        or is_number_like(value)
        or delimiter in value
        or value.startswith(LIST_ITEM_MARKER)
        or has_control_chars(value)
        or not STRUCTURAL_CHARS.isdisjoint(value)
    )


def encode_key(key: str) -> str:
    """Encode an object key, quoting anything that isn't identifier-like."""
    return key if BARE_KEY_PATTERN.fullmatch(key) else quote(key)


def parse_key(token: str) -> str:
    """
    Parse a key token, handling quoted keys.

    Raises:
        DecodeError: For empty or malformed keys.
    """
    token = token.strip()
    if not token:
        raise DecodeError("Missing key before ':'", ErrorReason.UNEXPECTED_LINE)
    if token.startswith('"'):
        return unquote_and_unescape(token)
    if '"' in token:
        raise DecodeError(f"Unexpected quote in key: {token}", ErrorReason.UNEXPECTED_LINE)
    return token


def find_unquoted(line: str, target: str) -> int:
    """Index of the first ``target`` outside quotes, or -1."""
    for i, char, quoted in scan(line):
        if char == target and not quoted:
            return i
    return -1


def find_unquoted_colon(line: str) -> int:
    """Index of the first colon outside quotes, or -1. Used to split ``key: value``."""
    return find_unquoted(line, ":")


def split_by_delimiter(value: str, delimiter: "Delimiter") -> list[str]:
    """
    Split on unquoted delimiters.

    Tokens are stripped but keep their quotes, so ``a, "b,c"`` gives
    ``["a", '"b,c"']``. An empty input yields one empty token.
    """
    tokens = []
    start = 0
    for i, char, quoted in scan(value):
        if char == delimiter and not quoted:
            tokens.append(value[start:i].strip())
            start = i + 1
    tokens.append(value[start:].strip())
    return tokens
