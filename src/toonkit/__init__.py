"""
toonkit - TOON (Token-Oriented Object Notation) for Python

A compact, indentation-based encoding of the JSON data model, built to
spend fewer tokens than JSON when structured data is sent to an LLM.

Usage:
    import toonkit

    # Encode Python data to TOON
    data = {"name": "Alice", "age": 30}
    encoded = toonkit.encode(data)

    # Decode TOON to Python data
    decoded = toonkit.decode(encoded)

    # With options
    encoded = toonkit.encode(data, {"indent": 4, "delimiter": "|"})
    decoded = toonkit.decode(text, toonkit.DecodeOptions(strict=False))

    # Without exceptions
    result = toonkit.try_decode(text)
    if not result.success:
        print(result.error.reason)
"""

__version__ = "0.4.0"

from .arrays import ArrayFormat, classify_array
from .decode import decode, decode_lines, try_decode
from .encode import encode, encode_lines, try_encode
from .errors import DecodeError, EncodeError, ErrorReason, OptionsError, ToonError
from .logs import configure_logging
from .normalize import ToCanonical, canonical, normalize
from .observe import LoggingObserver, NullObserver, Observer, get_default_observer, set_default_observer
from .options import DecodeOptions, EncodeOptions, KeyMode
from .result import Result
from .types import Delimiter, JsonValue
from .writer import LineWriter

__all__ = [
    # Version
    "__version__",
    # Main API
    "encode",
    "try_encode",
    "encode_lines",
    "decode",
    "try_decode",
    "decode_lines",
    # Options
    "EncodeOptions",
    "DecodeOptions",
    "KeyMode",
    # Errors
    "ToonError",
    "OptionsError",
    "EncodeError",
    "DecodeError",
    "ErrorReason",
    "Result",
    # Host values
    "normalize",
    "canonical",
    "ToCanonical",
    # Instrumentation
    "Observer",
    "NullObserver",
    "LoggingObserver",
    "get_default_observer",
    "set_default_observer",
    "configure_logging",
    # Building blocks
    "LineWriter",
    "ArrayFormat",
    "classify_array",
    # Types
    "JsonValue",
    "Delimiter",
]
