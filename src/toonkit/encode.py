"""TOON encoder implementation."""

from collections.abc import Iterator, Mapping
from typing import Any

from .arrays import ArrayFormat, classify_array, encode_empty, encode_inline, encode_tabular, list_header
from .errors import EncodeError
from .normalize import normalize
from .observe import Observer, instrumented
from .options import EncodeOptions, resolve_encode_options
from .primitives import encode_primitive
from .result import Result
from .string_utils import encode_key
from .types import JsonValue, Line
from .writer import LineWriter


def encode(
    value: Any,
    options: EncodeOptions | Mapping[str, Any] | None = None,
    *,
    observer: Observer | None = None,
) -> str:
    """
    Encode a Python value to TOON format.

    Args:
        value: The value to encode (dict, list, primitive, or anything
            ``normalize`` understands).
        options: Encoding options (model, mapping, or None for defaults).
        observer: Optional observer for this call.

    Returns:
        The TOON-formatted string.

    Raises:
        EncodeError: If the value contains something that cannot be encoded.
        OptionsError: If the options are invalid.
    """
    return try_encode(value, options, observer=observer).unwrap()


def try_encode(
    value: Any,
    options: EncodeOptions | Mapping[str, Any] | None = None,
    *,
    observer: Observer | None = None,
) -> Result[str]:
    """
    Encode a Python value to TOON format, returning a Result.

    Never raises ToonError; failures come back as ``Result.err(error)``.
    """

    def run() -> str:
        opts = resolve_encode_options(options)
        return encode_value(normalize(value), opts).render()

    return instrumented(
        "encode",
        {"data_type": _data_type(value)},
        observer,
        run,
        measure=lambda text: {"size": len(text)},
    )


def encode_lines(value: Any, options: EncodeOptions | Mapping[str, Any] | None = None) -> Iterator[str]:
    """
    Encode a Python value to TOON format, yielding lines.

    Args:
        value: The value to encode.
        options: Encoding options.

    Yields:
        Lines of TOON output, without newlines.
    """
    opts = resolve_encode_options(options)
    yield from encode_value(normalize(value), opts).lines()


def encode_value(value: JsonValue, options: EncodeOptions) -> LineWriter:
    """
    Encode a canonical value into a line writer.

    Objects become their field lines, arrays a keyless array block, and
    primitives a single line. An empty root object produces no lines.
    """
    writer = LineWriter(options.indent)

    if isinstance(value, dict):
        writer.push_block(encode_object(value, options))
    elif isinstance(value, list):
        writer.push_block(encode_array(None, value, options))
    else:
        writer.push(encode_primitive(value, options.delimiter), 0)

    return writer


def encode_object(obj: dict, options: EncodeOptions) -> list[Line]:
    """
    Encode an object's fields in alphabetical key order.

    Returns:
        Lines with depths relative to the object's own depth.
    """
    lines: list[Line] = []

    for key in _sorted_keys(obj):
        value = obj[key]
        encoded_key = encode_key(key)

        if isinstance(value, dict):
            # Nested object (an empty one is just the header)
            lines.append((f"{encoded_key}:", 0))
            lines.extend(_shift(encode_object(value, options), 1))
        elif isinstance(value, list):
            lines.extend(encode_array(key, value, options))
        else:
            lines.append((f"{encoded_key}: {encode_primitive(value, options.delimiter)}", 0))

    return lines


def encode_array(key: str | None, values: list, options: EncodeOptions) -> list[Line]:
    """
    Encode an array with the best format.

    Args:
        key: The field name, or None for root arrays and arrays nested
            directly in a list.
        values: The array elements.
        options: Encoding options.

    Returns:
        Header line at relative depth 0, followed by rows or items.
    """
    fmt = classify_array(values)

    if fmt is ArrayFormat.EMPTY:
        return encode_empty(key, options)
    if fmt is ArrayFormat.INLINE:
        return encode_inline(key, values, options)
    if fmt is ArrayFormat.TABULAR:
        return encode_tabular(key, values, options)

    lines = [list_header(key, values, options)]
    for item in values:
        lines.extend(_shift(encode_list_item(item, options), 1))
    return lines


def encode_list_item(item: JsonValue, options: EncodeOptions) -> list[Line]:
    """
    Encode one list-format element, starting with the ``- `` marker.

    Objects and arrays are encoded as if they sat one level below the
    marker; their first line is then pulled up onto the marker line, so
    an object's first field shares it and the rest align beneath.
    """
    if isinstance(item, dict):
        if not item:
            return [("-", 0)]
        block = encode_object(item, options)
    elif isinstance(item, list):
        block = encode_array(None, item, options)
    else:
        return [(f"- {encode_primitive(item, options.delimiter)}", 0)]

    first, _ = block[0]
    return [(f"- {first}", 0), *_shift(block[1:], 1)]


def _shift(lines: list[Line], offset: int) -> list[Line]:
    return [(content, depth + offset) for content, depth in lines]


def _sorted_keys(obj: dict) -> list[str]:
    for key in obj:
        if not isinstance(key, str):
            raise EncodeError(f"Object keys must be strings, got {type(key).__name__}", value=key)
    return sorted(obj)


def _data_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__
