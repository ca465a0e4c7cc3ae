"""TOON decoder implementation."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from .errors import DecodeError, ErrorReason, format_context
from .observe import Observer, instrumented
from .options import DecodeOptions, KeyMode, resolve_decode_options
from .primitives import parse_delimited, parse_primitive, parse_value_token
from .result import Result
from .string_utils import LIST_ITEM_MARKER, find_unquoted_colon, parse_key, split_by_delimiter
from .types import ArrayHeaderInfo, JsonValue, ParsedLine

if TYPE_CHECKING:
    from collections.abc import Generator

# Pattern for array header: key[<marker?>N<delim?>]{fields}:
ARRAY_HEADER_PATTERN = re.compile(
    r"^(?P<key>[^:\[\]{}\"]+|\"(?:[^\"\\]|\\.)*\")?"  # Optional key (possibly quoted)
    r"\[(?P<marker>[^\d\s\[\]{}:\"\\,|]*)(?P<length>\d+)(?P<delim>[,\t|])?\]"  # [#N<delim?>]
    r"(?:\{(?P<fields>(?:[^}\"]|\"(?:[^\"\\]|\\.)*\")*)\})?"  # Optional {fields}
    r":(?P<rest>.*)$"  # Colon and rest
)


def decode(
    text: str,
    options: DecodeOptions | Mapping[str, Any] | None = None,
    *,
    observer: Observer | None = None,
) -> JsonValue:
    """
    Decode TOON text to a Python value.

    Args:
        text: The TOON-formatted string.
        options: Decoding options (model, mapping, or None for defaults).
        observer: Optional observer for this call.

    Returns:
        The decoded Python value. Empty input decodes to ``{}``.

    Raises:
        DecodeError: For malformed input or strict mode violations.
        OptionsError: If the options are invalid.
    """
    return try_decode(text, options, observer=observer).unwrap()


def try_decode(
    text: str,
    options: DecodeOptions | Mapping[str, Any] | None = None,
    *,
    observer: Observer | None = None,
) -> Result[JsonValue]:
    """
    Decode TOON text, returning a Result instead of raising.

    Raises:
        TypeError: If ``text`` is not a string.
    """
    if not isinstance(text, str):
        raise TypeError(f"decode() expects str, got {type(text).__name__}")

    def run() -> JsonValue:
        return decode_lines(text.split("\n"), options)

    return instrumented("decode", {"input_size": len(text)}, observer, run)


def decode_lines(
    lines: Iterable[str], options: DecodeOptions | Mapping[str, Any] | None = None
) -> JsonValue:
    """
    Decode TOON from pre-split lines.

    Args:
        lines: Iterable of line strings (trailing newlines are ignored).
        options: Decoding options.

    Returns:
        The decoded Python value.
    """
    opts = resolve_decode_options(options)
    cursor = _Cursor(list(_parse_lines(lines, opts)), opts)

    try:
        return _decode_root(cursor)
    except DecodeError as e:
        if e.line is not None or cursor.current is None:
            raise
        # Token-level errors are raised without a location
        line = cursor.current
        raise e.at(line.line_number, line.column, format_context(line.raw, line.line_number, line.column)) from e


class _Cursor:
    """Cursor for iterating through parsed lines."""

    def __init__(self, lines: list[ParsedLine], options: DecodeOptions):
        self.lines = lines
        self.options = options
        self.pos = 0
        self.current: ParsedLine | None = None
        """Most recently examined line, used to locate token errors."""
        self._open_blocks: list[int] = []

    @property
    def strict(self) -> bool:
        return self.options.strict

    def peek(self) -> ParsedLine | None:
        """Look at the next non-blank line without advancing."""
        blank = None
        while self.pos < len(self.lines):
            line = self.lines[self.pos]
            if not line.is_blank:
                if blank is not None and self._inside_block(line):
                    raise self.error(blank, "Blank line inside block", ErrorReason.BLANK_LINE)
                self.current = line
                return line
            if blank is None:
                blank = line
            self.pos += 1
        return None

    def advance(self) -> ParsedLine | None:
        """Get the next non-blank line and advance past it."""
        line = self.peek()
        if line:
            self.pos += 1
        return line

    def open_block(self, depth: int) -> None:
        """Mark that array items or nested fields are being read at ``depth``."""
        self._open_blocks.append(depth)

    def close_block(self) -> None:
        self._open_blocks.pop()

    def _inside_block(self, line: ParsedLine) -> bool:
        # Root fields never open a block, so blank lines between them pass
        return self.strict and any(line.depth >= depth for depth in self._open_blocks)

    def key(self, key: str, line: ParsedLine) -> str:
        """Materialize a decoded key according to the key mode."""
        mode = self.options.keys
        if mode is KeyMode.INTERNED:
            return sys.intern(key)
        if mode is KeyMode.EXISTING and key not in self.options.known_keys:
            raise self.error(line, f"Unknown key: {key!r}", ErrorReason.UNKNOWN_KEY)
        return key

    def error(
        self, line: ParsedLine, message: str, reason: ErrorReason, column: int | None = None
    ) -> DecodeError:
        """Build a DecodeError pointing at ``line``."""
        column = column if column is not None else line.column
        return DecodeError(
            message,
            reason,
            line=line.line_number,
            column=column,
            context=format_context(line.raw, line.line_number, column),
        )


def _parse_lines(lines: Iterable[str], options: DecodeOptions) -> Generator[ParsedLine, None, None]:
    """Parse raw lines into ParsedLine objects."""
    for i, raw in enumerate(lines, start=1):
        text = raw.rstrip()
        stripped = text.lstrip(" ")
        indent = len(text) - len(stripped)

        if not stripped:
            yield ParsedLine(raw=text, content="", indent=0, depth=0, line_number=i)
            continue

        # Strict mode: only spaces may indent
        if stripped[0].isspace():
            if options.strict:
                raise DecodeError(
                    "Tab in indentation (use spaces)",
                    ErrorReason.INDENTATION,
                    line=i,
                    column=indent + 1,
                    context=format_context(text, i, indent + 1),
                )
            stripped = stripped.lstrip()

        # Strict mode: check indent is multiple of indent_size
        if options.strict and indent % options.indent != 0:
            raise DecodeError(
                f"Indentation {indent} is not a multiple of {options.indent}",
                ErrorReason.INDENTATION,
                line=i,
                column=1,
                context=format_context(text, i, 1),
            )

        yield ParsedLine(
            raw=text,
            content=stripped,
            indent=indent,
            depth=indent // options.indent,
            line_number=i,
        )


def _parse_array_header(content: str, cursor: _Cursor, line: ParsedLine) -> ArrayHeaderInfo | None:
    """Parse an array header, or return None if the content isn't one."""
    match = ARRAY_HEADER_PATTERN.match(content)
    if not match:
        return None

    raw_key = match.group("key")
    key = cursor.key(parse_key(raw_key), line) if raw_key is not None else None
    delimiter = match.group("delim") or ","

    fields: list[str] = []
    fields_src = match.group("fields")
    if fields_src is not None:
        if not fields_src.strip():
            raise cursor.error(line, "Tabular header has no fields", ErrorReason.UNEXPECTED_LINE)
        for token in split_by_delimiter(fields_src, delimiter):
            name = cursor.key(parse_key(token), line)
            if name in fields:
                raise cursor.error(line, f"Duplicate field in header: {name!r}", ErrorReason.DUPLICATE_KEY)
            fields.append(name)

    return ArrayHeaderInfo(
        key=key,
        length=int(match.group("length")),
        delimiter=delimiter,
        fields=fields,
        rest=match.group("rest").strip(),
    )


def _is_list_item(content: str) -> bool:
    return content == LIST_ITEM_MARKER or content.startswith(LIST_ITEM_MARKER + " ")


def _decode_root(cursor: _Cursor) -> JsonValue:
    """Decode the root value."""
    line = cursor.peek()
    if not line:
        return {}

    if line.depth != 0:
        raise cursor.error(line, "Unexpected indentation at document start", ErrorReason.INDENTATION)

    if _is_list_item(line.content):
        # Headerless root list
        return _finish_root(cursor, _decode_list_items(cursor, None, line, 0))

    header = _parse_array_header(line.content, cursor, line)
    if header is not None and header.key is None:
        # Root array
        cursor.advance()
        value = _decode_array(cursor, header, line, 0)
    elif header is None and find_unquoted_colon(line.content) == -1:
        # Single primitive
        cursor.advance()
        value = parse_primitive(line.content)
    else:
        value = _decode_object(cursor, 0)

    return _finish_root(cursor, value)


def _finish_root(cursor: _Cursor, value: JsonValue) -> JsonValue:
    leftover = cursor.peek()
    if leftover is not None:
        raise cursor.error(leftover, "Unexpected content after root value", ErrorReason.UNEXPECTED_LINE)
    return value


def _decode_object(cursor: _Cursor, depth: int, result: dict | None = None) -> dict:
    """Decode object fields at the given depth, continuing ``result`` if given."""
    result = {} if result is None else result
    nested = depth > 0
    if nested:
        cursor.open_block(depth)

    while True:
        line = cursor.peek()
        if line is None or line.depth < depth:
            break
        if line.depth > depth:
            raise cursor.error(
                line,
                f"Unexpected indentation (expected depth {depth}, got {line.depth})",
                ErrorReason.INDENTATION,
            )
        if _is_list_item(line.content):
            raise cursor.error(line, "List item outside of an array", ErrorReason.UNEXPECTED_LINE)

        cursor.advance()
        key, value = _decode_field(cursor, line, line.content, depth)
        _store(cursor, result, key, value, line)

    if nested:
        cursor.close_block()
    return result


def _store(cursor: _Cursor, result: dict, key: str, value: JsonValue, line: ParsedLine) -> None:
    if key in result:
        raise cursor.error(line, f"Duplicate key: {key!r}", ErrorReason.DUPLICATE_KEY)
    result[key] = value


def _decode_field(cursor: _Cursor, line: ParsedLine, content: str, depth: int) -> tuple[str, JsonValue]:
    """
    Decode one ``key: value`` or ``key[N]...`` field.

    ``content`` is the field text, which for the first field of a list
    item is what follows the ``- `` marker. Nested values sit at
    ``depth + 1``.
    """
    header = _parse_array_header(content, cursor, line)
    if header is not None:
        if header.key is None:
            raise cursor.error(line, "Array header without a key inside an object", ErrorReason.UNEXPECTED_LINE)
        return header.key, _decode_array(cursor, header, line, depth)

    colon = find_unquoted_colon(content)
    if colon == -1:
        raise cursor.error(line, f"Expected 'key: value', got: {content}", ErrorReason.UNEXPECTED_LINE)

    key = cursor.key(parse_key(content[:colon]), line)
    value_part = content[colon + 1 :].strip()
    if value_part:
        return key, parse_value_token(value_part)

    # Nested object, or an empty one when nothing deeper follows
    next_line = cursor.peek()
    if next_line is not None and next_line.depth > depth:
        return key, _decode_object(cursor, depth + 1)
    return key, {}


def _decode_array(cursor: _Cursor, header: ArrayHeaderInfo, line: ParsedLine, depth: int) -> list:
    """Decode the body of an array whose header sits at ``depth``."""
    if header.is_tabular:
        if header.rest:
            raise cursor.error(line, "Unexpected values after tabular header", ErrorReason.UNEXPECTED_LINE)
        return _decode_tabular_rows(cursor, header, line, depth + 1)

    if header.rest:
        return _decode_inline_values(cursor, header, line)

    return _decode_list_items(cursor, header, line, depth + 1)


def _check_length(cursor: _Cursor, header: ArrayHeaderInfo, line: ParsedLine, actual: int, kind: str) -> None:
    if cursor.strict and actual != header.length:
        raise cursor.error(
            line,
            f"{kind} length mismatch: expected {header.length}, got {actual}",
            ErrorReason.LENGTH_MISMATCH,
        )


def _decode_inline_values(cursor: _Cursor, header: ArrayHeaderInfo, line: ParsedLine) -> list:
    """Decode inline primitive array values."""
    values = parse_delimited(header.rest, header.delimiter)
    _check_length(cursor, header, line, len(values), "Inline array")
    return values


def _decode_tabular_rows(cursor: _Cursor, header: ArrayHeaderInfo, header_line: ParsedLine, depth: int) -> list:
    """Decode tabular array rows."""
    rows = []
    width = len(header.fields)
    cursor.open_block(depth)

    while True:
        line = cursor.peek()
        if line is None or line.depth < depth:
            break
        if line.depth > depth:
            raise cursor.error(line, "Unexpected indentation in tabular rows", ErrorReason.INDENTATION)

        cursor.advance()
        tokens = split_by_delimiter(line.content, header.delimiter)
        if len(tokens) != width:
            if cursor.strict:
                raise cursor.error(
                    line,
                    f"Row has {len(tokens)} values, expected {width}",
                    ErrorReason.LENGTH_MISMATCH,
                )
            tokens = (tokens + [""] * width)[:width]

        rows.append({field: parse_primitive(token) for field, token in zip(header.fields, tokens)})

    cursor.close_block()
    _check_length(cursor, header, header_line, len(rows), "Tabular array")
    return rows


def _decode_list_items(
    cursor: _Cursor, header: ArrayHeaderInfo | None, header_line: ParsedLine, depth: int
) -> list:
    """Decode ``- `` items at the given depth (``header`` is None for a headerless root list)."""
    items = []
    cursor.open_block(depth)

    while True:
        line = cursor.peek()
        if line is None or line.depth < depth:
            break
        if line.depth > depth:
            raise cursor.error(line, "Unexpected indentation in list items", ErrorReason.INDENTATION)
        if not _is_list_item(line.content):
            raise cursor.error(line, f"Expected list item, got: {line.content}", ErrorReason.UNEXPECTED_LINE)

        cursor.advance()
        items.append(_decode_list_item(cursor, line, depth))

    cursor.close_block()
    if header is not None:
        _check_length(cursor, header, header_line, len(items), "List array")
    return items


def _decode_list_item(cursor: _Cursor, line: ParsedLine, depth: int) -> JsonValue:
    """
    Decode a single list item.

    The text after ``- `` is read as if it were a line one level deeper
    than the marker, so an object's remaining fields sit at ``depth + 1``.
    """
    if line.content == LIST_ITEM_MARKER:
        return {}

    body = line.content[2:].strip()
    inner = depth + 1

    header = _parse_array_header(body, cursor, line)
    if header is not None:
        value = _decode_array(cursor, header, line, inner)
        if header.key is None:
            # Nested array item
            return value
        return _decode_object(cursor, inner, {header.key: value})

    if find_unquoted_colon(body) != -1:
        key, value = _decode_field(cursor, line, body, inner)
        return _decode_object(cursor, inner, {key: value})

    return parse_primitive(body)
