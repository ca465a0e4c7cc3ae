"""Validation and defaulting of encode/decode options."""

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PositiveInt, ValidationError, field_validator

from .errors import OptionsError
from .types import Delimiter

# A length marker must not be mistaken for the count or the bracket syntax
_INVALID_MARKER_CHARS = re.compile(r"[\d\s\[\]{}:\"\\,|]")


class KeyMode(str, Enum):
    """How decoded object keys are materialized."""

    STRINGS = "strings"
    """Leave keys as plain strings."""

    INTERNED = "interned"
    """Intern every key with ``sys.intern``."""

    EXISTING = "existing"
    """Only accept keys from ``DecodeOptions.known_keys``."""


class EncodeOptions(BaseModel):
    """Options for TOON encoding."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    indent: PositiveInt = Field(default=2, validation_alias=AliasChoices("indent", "indent_width"))
    """Number of spaces per indentation level."""

    delimiter: Delimiter = ","
    """Delimiter for inline arrays and tabular rows."""

    length_marker: str | None = None
    """Optional prefix placed before array counts, e.g. ``#`` gives ``[#3]``."""

    @field_validator("length_marker")
    @classmethod
    def _check_length_marker(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if not value or _INVALID_MARKER_CHARS.search(value):
            raise ValueError(
                "length_marker must be a non-empty prefix without digits, whitespace, "
                f"brackets, quotes or delimiters, got: {value!r}"
            )
        return value


class DecodeOptions(BaseModel):
    """Options for TOON decoding."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    strict: bool = True
    """Reject indentation, blank-line and declared-length violations."""

    indent: PositiveInt = Field(default=2, validation_alias=AliasChoices("indent", "indent_width"))
    """Expected indentation size (for strict mode validation)."""

    keys: KeyMode = Field(default=KeyMode.STRINGS, validation_alias=AliasChoices("keys", "key_mode"))
    """How object keys are produced."""

    known_keys: frozenset[str] = frozenset()
    """Vocabulary accepted by ``KeyMode.EXISTING``."""


def resolve_encode_options(options: EncodeOptions | Mapping[str, Any] | None) -> EncodeOptions:
    """
    Validate and default encode options.

    Args:
        options: An EncodeOptions instance, a mapping of option values, or None.

    Returns:
        A frozen EncodeOptions.

    Raises:
        OptionsError: If any option is invalid.
    """
    return _resolve(EncodeOptions, options)


def resolve_decode_options(options: DecodeOptions | Mapping[str, Any] | None) -> DecodeOptions:
    """
    Validate and default decode options.

    Args:
        options: A DecodeOptions instance, a mapping of option values, or None.

    Returns:
        A frozen DecodeOptions.

    Raises:
        OptionsError: If any option is invalid.
    """
    return _resolve(DecodeOptions, options)


def _resolve(model: type[BaseModel], options: Any) -> Any:
    if options is None:
        return model()
    if isinstance(options, model):
        return options
    if not isinstance(options, Mapping):
        raise OptionsError(
            f"Options must be {model.__name__}, a mapping or None, got {type(options).__name__}"
        )
    try:
        return model.model_validate(dict(options))
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise OptionsError(
            f"Invalid options: {first['msg']}",
            field=field,
            details={"errors": e.error_count()},
        ) from e
