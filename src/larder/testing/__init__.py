"""Testing utilities for larder containers."""

from .recorder import CallRecord, CallRecorder, recorded

__all__ = [
    "CallRecord",
    "CallRecorder",
    "recorded",
]
