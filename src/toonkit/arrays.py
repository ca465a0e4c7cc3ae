"""Array shape detection and the flat array formats (empty, inline, tabular)."""

from enum import Enum

from .options import EncodeOptions
from .primitives import encode_primitive, format_array_header
from .types import JsonValue, Line


class ArrayFormat(str, Enum):
    """The encodings an array can take, in decision order."""

    EMPTY = "empty"
    INLINE = "inline"
    TABULAR = "tabular"
    LIST = "list"


def is_primitive(value: JsonValue) -> bool:
    """Check if value is a primitive (not dict or list)."""
    return not isinstance(value, (dict, list))


def classify_array(values: list) -> ArrayFormat:
    """
    Pick the encoding for an array.

    1. Empty arrays use the empty form.
    2. All-primitive arrays are inline.
    3. Objects sharing one non-empty key set with only primitive values
       are tabular.
    4. Everything else is a list.
    """
    if not values:
        return ArrayFormat.EMPTY
    if all(is_primitive(v) for v in values):
        return ArrayFormat.INLINE
    if _is_tabular(values):
        return ArrayFormat.TABULAR
    return ArrayFormat.LIST


def _is_tabular(values: list) -> bool:
    if not all(isinstance(v, dict) for v in values):
        return False

    first_keys = set(values[0].keys())
    if not first_keys:
        return False

    for item in values[1:]:
        if set(item.keys()) != first_keys:
            return False

    return all(is_primitive(v) for item in values for v in item.values())


def tabular_fields(values: list[dict]) -> list[str]:
    """Sorted field names shared by every row of a tabular array."""
    return sorted(values[0].keys())


def encode_empty(key: str | None, options: EncodeOptions) -> list[Line]:
    """Encode an empty array, e.g. ``items[0]:``."""
    return [(format_array_header(0, key, delimiter=options.delimiter, length_marker=options.length_marker), 0)]


def encode_inline(key: str | None, values: list, options: EncodeOptions) -> list[Line]:
    """Encode a primitive array on one line, e.g. ``tags[3]: a,b,c``."""
    header = format_array_header(
        len(values), key, delimiter=options.delimiter, length_marker=options.length_marker
    )
    joined = options.delimiter.join(encode_primitive(v, options.delimiter) for v in values)
    return [(f"{header} {joined}", 0)]


def encode_tabular(key: str | None, values: list[dict], options: EncodeOptions) -> list[Line]:
    """
    Encode a uniform object array as a field header plus one row per object.

    Example:
        users[2]{age,name}:
          30,Alice
          25,Bob
    """
    fields = tabular_fields(values)
    header = format_array_header(
        len(values), key, fields=fields, delimiter=options.delimiter, length_marker=options.length_marker
    )
    lines: list[Line] = [(header, 0)]
    for row in values:
        cells = (encode_primitive(row[f], options.delimiter) for f in fields)
        lines.append((options.delimiter.join(cells), 1))
    return lines


def list_header(key: str | None, values: list, options: EncodeOptions) -> Line:
    """Header line of a list-format array, e.g. ``items[2]:``."""
    return (format_array_header(len(values), key, delimiter=options.delimiter, length_marker=options.length_marker), 0)
