"""Cooperative cancellation for SQLite reads.

A caller hands a threading.Event to long-running read operations. The
event is checked before each statement starts and, while a statement is
running, from an SQLite progress handler so the statement is aborted
instead of being drained.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from chatlog.errors import resolution_cancelled

# SQLite virtual machine instructions between cancel checks
PROGRESS_HANDLER_INTERVAL = 1000


def is_cancelled(cancel_event: threading.Event | None) -> bool:
    """Return True if the cancel event exists and has been set."""
    return cancel_event is not None and cancel_event.is_set()


def raise_if_cancelled(cancel_event: threading.Event | None, operation: str | None = None) -> None:
    """Raise ResolutionCancelledError if the cancel event has fired.

    Args:
        cancel_event: Event set by the caller to request cancellation.
        operation: Name of the operation about to run, for the error message.

    Raises:
        ResolutionCancelledError: If cancellation was requested.
    """
    if is_cancelled(cancel_event):
        raise resolution_cancelled(operation)


def is_interrupt_error(exc: BaseException) -> bool:
    """Check whether an sqlite error was caused by an aborted statement."""
    return isinstance(exc, sqlite3.OperationalError) and "interrupted" in str(exc).lower()


@contextmanager
def interruptible(
    conn: sqlite3.Connection,
    cancel_event: threading.Event | None,
    *,
    interval: int = PROGRESS_HANDLER_INTERVAL,
) -> Iterator[None]:
    """Abort statements on conn as soon as cancel_event is set.

    Installs a progress handler for the duration of the block and removes
    it afterwards. sqlite3 cannot report an existing handler, so one set by
    the caller on conn is replaced and not restored. With no cancel event
    nothing is installed and the caller's handler is left alone.

    Args:
        conn: Open SQLite connection.
        cancel_event: Event set by the caller to request cancellation.
        interval: Instructions between checks of the event.
    """
    if cancel_event is None:
        yield
        return

    def _check() -> int:
        return 1 if cancel_event.is_set() else 0

    conn.set_progress_handler(_check, interval)
    try:
        yield
    finally:
        conn.set_progress_handler(None, interval)
