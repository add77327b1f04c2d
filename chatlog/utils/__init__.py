"""Utility modules for chatlog."""

from chatlog.utils.cancellation import (
    interruptible,
    is_cancelled,
    is_interrupt_error,
    raise_if_cancelled,
)

__all__ = [
    "interruptible",
    "is_cancelled",
    "is_interrupt_error",
    "raise_if_cancelled",
]
