"""Record calls made to initializers, configurators and shutdown functions."""

import functools
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass
class CallRecord:
    """Single recorded call."""
    label: str
    kwargs: dict[str, Any] = field(default_factory=dict)
    result: Any = None


class CallRecorder:
    """Wraps functions so every call is recorded in a shared log.

    The wrapper keeps the signature of the wrapped function, so the
    container injects the same arguments it would inject into the original.

    Usage:
        recorder = CallRecorder()
        container.register("db", recorder.wrap(lambda db_url: Database(db_url), "db"))
        ...
        assert recorder.count("db") == 1
    """

    def __init__(self):
        self.calls: list[CallRecord] = []

    def wrap(self, fn: Callable[..., Any], label: Optional[str] = None) -> Callable[..., Any]:
        """Return a recording wrapper around ``fn``."""
        label = label or getattr(fn, "__name__", repr(fn))

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            bound = _bind(fn, args, kwargs)
            result = fn(*args, **kwargs)
            self.calls.append(CallRecord(label=label, kwargs=bound, result=result))
            return result

        return wrapper

    def count(self, label: Optional[str] = None) -> int:
        """Number of calls, optionally only those with ``label``."""
        if label is None:
            return len(self.calls)
        return sum(1 for call in self.calls if call.label == label)

    def labels(self) -> list[str]:
        """Labels of all calls, in call order."""
        return [call.label for call in self.calls]

    def last(self, label: str) -> CallRecord:
        """Most recent call with ``label``."""
        for call in reversed(self.calls):
            if call.label == label:
                return call
        raise ValueError(f"No recorded call for: {label}")

    def clear(self) -> None:
        self.calls.clear()


def recorded(recorder: CallRecorder, label: Optional[str] = None) -> Callable[[Callable], Callable]:
    """Decorator form of ``CallRecorder.wrap``."""
    def decorator(fn: Callable) -> Callable:
        return recorder.wrap(fn, label)
    return decorator


def _bind(fn: Callable[..., Any], args: tuple, kwargs: dict) -> dict[str, Any]:
    try:
        bound = inspect.signature(fn).bind(*args, **kwargs)
    except (TypeError, ValueError):
        return dict(kwargs)
    return dict(bound.arguments)
