"""
Conversion of host Python values into the canonical TOON value tree.

The encoder itself only accepts ``None``, ``bool``, ``int``, ``float``,
``str``, ``dict[str, ...]`` and ``list``. ``normalize`` is the upstream step
that turns richer values (dataclasses, pydantic models, dates, sets, custom
types) into that tree.
"""

import dataclasses
import datetime
import math
from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from .errors import EncodeError, ErrorReason
from .types import JsonValue

C = TypeVar("C", bound=type)


@runtime_checkable
class ToCanonical(Protocol):
    """Types that supply their own TOON representation."""

    def to_canonical(self) -> Any:
        """Return a value the normalizer can turn into canonical form."""
        ...


def canonical(
    cls: C | None = None,
    *,
    only: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
) -> C | Callable[[C], C]:
    """
    Class decorator that adds a ``to_canonical`` method built from fields.

    Works on dataclasses and on plain classes (using ``vars()``).

    Example:
        @canonical(exclude=["password"])
        @dataclass
        class User:
            name: str
            password: str
    """
    if only is not None and exclude is not None:
        raise ValueError("canonical() accepts either only= or exclude=, not both")

    only_set = frozenset(only) if only is not None else None
    exclude_set = frozenset(exclude or ())

    def decorate(target: C) -> C:
        def to_canonical(self: Any) -> dict[str, Any]:
            fields = _object_fields(self)
            if only_set is not None:
                return {k: v for k, v in fields.items() if k in only_set}
            return {k: v for k, v in fields.items() if k not in exclude_set}

        target.to_canonical = to_canonical  # type: ignore[attr-defined]
        return target

    if cls is not None:
        return decorate(cls)
    return decorate


def normalize(value: Any) -> JsonValue:
    """
    Normalize a value into the canonical tree.

    Converts:
    - Objects with ``to_canonical()`` to whatever they return (normalized)
    - Dataclasses and pydantic models to dicts
    - Mappings to dicts with string keys
    - Tuples, lists, sets and other iterables to lists
    - Dates, times and datetimes to ISO strings
    - Decimals to int or float, enums to their value

    Raises:
        EncodeError: For unsupported values or circular references.
    """
    return _normalize(value, "$", set())


def _normalize(value: Any, path: str, active: set[int]) -> JsonValue:
    if value is None:
        return None

    if isinstance(value, Enum):
        return _normalize(value.value, path, active)

    if isinstance(value, (bool, str)):
        return value

    if isinstance(value, int):
        return int(value)

    if isinstance(value, float):
        return float(value)

    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        if value == value.to_integral_value():
            return int(value)
        return float(value)

    if isinstance(value, (datetime.date, datetime.time)):
        # datetime is a date subclass
        return value.isoformat()

    if isinstance(value, (bytes, bytearray, memoryview)):
        raise EncodeError("Cannot encode binary data", value=value, path=path)

    # Containers from here on can contain themselves
    marker = id(value)
    if marker in active:
        raise EncodeError("Circular reference detected", ErrorReason.CIRCULAR_REFERENCE, value=value, path=path)
    active.add(marker)
    try:
        return _normalize_container(value, path, active)
    finally:
        active.discard(marker)


def _normalize_container(value: Any, path: str, active: set[int]) -> JsonValue:
    if isinstance(value, ToCanonical):
        return _normalize(value.to_canonical(), path, active)

    if isinstance(value, BaseModel):
        return _normalize(value.model_dump(), path, active)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return _normalize(fields, path, active)

    if isinstance(value, Mapping):
        result: dict[str, JsonValue] = {}
        for key, item in value.items():
            str_key = _normalize_key(key, path)
            if str_key in result:
                raise EncodeError(f"Duplicate key after conversion: {str_key!r}", value=key, path=path)
            result[str_key] = _normalize(item, f"{path}.{str_key}", active)
        return result

    if isinstance(value, (set, frozenset)):
        return [_normalize(v, f"{path}[{i}]", active) for i, v in enumerate(_sorted_members(value))]

    if isinstance(value, Iterable):
        return [_normalize(v, f"{path}[{i}]", active) for i, v in enumerate(value)]

    raise EncodeError(f"Cannot encode value of type {type(value).__name__}", value=value, path=path)


def _normalize_key(key: Any, path: str) -> str:
    """Convert a mapping key the way ``json.dumps`` does."""
    if isinstance(key, Enum) and isinstance(key.value, str):
        return key.value
    if isinstance(key, str):
        return key
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, int):
        return str(key)
    if isinstance(key, float):
        if math.isnan(key) or math.isinf(key):
            raise EncodeError(f"Cannot use {key!r} as an object key", value=key, path=path)
        return repr(key)
    raise EncodeError(f"Object keys must be strings, got {type(key).__name__}", value=key, path=path)


def _sorted_members(value: set | frozenset) -> list:
    try:
        return sorted(value)
    except TypeError:
        # Mixed-type sets still need a deterministic order
        return sorted(value, key=lambda v: (type(v).__name__, str(v)))


def _object_fields(obj: Any) -> dict[str, Any]:
    if dataclasses.is_dataclass(obj):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
