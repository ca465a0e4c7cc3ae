"""
Instrumentation hooks around encode/decode calls.

An observer receives begin/end/error notifications for every call. It is
fire-and-forget: whatever an observer does (or raises) never changes the
result of the call it watches.
"""

import time
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

from .errors import ToonError
from .logs import get_logger
from .result import Result

T = TypeVar("T")

logger = get_logger(__name__)


class Observer(Protocol):
    """Receives notifications around each encode/decode call."""

    def begin(self, operation: str, metadata: dict[str, Any]) -> None: ...

    def end(self, operation: str, metadata: dict[str, Any], duration: float) -> None: ...

    def error(self, operation: str, metadata: dict[str, Any], duration: float, error: ToonError) -> None: ...


class NullObserver:
    """Observer that ignores every notification."""

    def begin(self, operation: str, metadata: dict[str, Any]) -> None:
        pass

    def end(self, operation: str, metadata: dict[str, Any], duration: float) -> None:
        pass

    def error(self, operation: str, metadata: dict[str, Any], duration: float, error: ToonError) -> None:
        pass


class LoggingObserver:
    """
    Observer that emits structured log events.

    Events are named ``toon.<operation>.start``, ``toon.<operation>.stop``
    and ``toon.<operation>.exception``; durations are in milliseconds.
    """

    def __init__(self, logger_name: str = "toonkit.calls"):
        self.logger = get_logger(logger_name)

    def begin(self, operation: str, metadata: dict[str, Any]) -> None:
        self.logger.debug(f"toon.{operation}.start", **metadata)

    def end(self, operation: str, metadata: dict[str, Any], duration: float) -> None:
        self.logger.info(f"toon.{operation}.stop", duration_ms=round(duration * 1000, 3), **metadata)

    def error(self, operation: str, metadata: dict[str, Any], duration: float, error: ToonError) -> None:
        self.logger.warning(
            f"toon.{operation}.exception",
            duration_ms=round(duration * 1000, 3),
            error=error.to_dict(),
            **metadata,
        )


_default_observer: Observer = NullObserver()


def get_default_observer() -> Observer:
    """Return the process-wide observer used when a call passes none."""
    return _default_observer


def set_default_observer(observer: Observer | None) -> None:
    """
    Install a process-wide observer (``None`` restores the no-op observer).

    Intended to be called once at process start.
    """
    global _default_observer
    _default_observer = observer if observer is not None else NullObserver()


def instrumented(
    operation: str,
    metadata: dict[str, Any],
    observer: Observer | None,
    func: Callable[[], T],
    measure: Callable[[T], dict[str, Any]] | None = None,
) -> Result[T]:
    """
    Run ``func`` with observer notifications and capture its outcome.

    ToonError raised by ``func`` becomes a failed Result; any other
    exception is a bug and propagates.

    Args:
        operation: "encode" or "decode".
        metadata: Call metadata passed to every notification.
        observer: Observer for this call, or None for the default one.
        func: The call to run.
        measure: Optional function adding result metadata (e.g. size) to the
            end notification.

    Returns:
        Result holding the value or the structured error.
    """
    obs = observer if observer is not None else _default_observer
    _notify(obs.begin, operation, dict(metadata))
    start = time.perf_counter()

    try:
        value = func()
    except ToonError as e:
        _notify(obs.error, operation, dict(metadata), time.perf_counter() - start, e)
        return Result.err(e)

    end_metadata = dict(metadata)
    if measure is not None:
        end_metadata.update(measure(value))
    _notify(obs.end, operation, end_metadata, time.perf_counter() - start)
    return Result.ok(value)


def _notify(callback: Callable[..., None], operation: str, *args: Any) -> None:
    try:
        callback(operation, *args)
    except Exception as e:
        logger.warning("observer_failed", operation=operation, callback=getattr(callback, "__name__", "?"), error=str(e))
