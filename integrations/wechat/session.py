"""Query execution for a single label resolution pass.

Every read issued by the label engine goes through run_read(), which
applies the error taxonomy of the engine:

- a missing table or column is a schema variant, reported as ``None``;
- a statement aborted because the caller's cancel event fired raises
  ResolutionCancelledError;
- any other sqlite error raises LabelQueryError naming the operation.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chatlog.errors import label_query_failed, resolution_cancelled
from chatlog.utils.cancellation import (
    interruptible,
    is_cancelled,
    is_interrupt_error,
    raise_if_cancelled,
)

if TYPE_CHECKING:
    from .schema import SchemaDescriptor

logger = logging.getLogger(__name__)

_ABSENCE_MARKERS = ("no such table", "no such column")


def is_schema_absence_error(exc: BaseException) -> bool:
    """Check whether an sqlite error means a table or column does not exist."""
    if not isinstance(exc, sqlite3.Error):
        return False
    message = str(exc).lower()
    return any(marker in message for marker in _ABSENCE_MARKERS)


def run_read(
    conn: sqlite3.Connection,
    sql: str,
    params: Sequence[Any] = (),
    *,
    operation: str,
    cancel_event: threading.Event | None = None,
    table: str | None = None,
) -> list[Any] | None:
    """Run one read-only statement and fetch every row.

    Args:
        conn: Open SQLite connection owned by the caller.
        sql: Statement to execute.
        params: Positional query parameters.
        operation: Operation name used in error messages.
        cancel_event: Event set by the caller to request cancellation.
        table: Table the statement targets, recorded on errors.

    Returns:
        The fetched rows, or None if the statement referenced a missing
        table or column.

    Raises:
        ResolutionCancelledError: If the cancel event fired.
        LabelQueryError: On any other database failure.
    """
    raise_if_cancelled(cancel_event, operation)
    try:
        with interruptible(conn, cancel_event):
            return conn.execute(sql, tuple(params)).fetchall()
    except sqlite3.Error as e:
        if is_interrupt_error(e) and is_cancelled(cancel_event):
            raise resolution_cancelled(operation, e) from e
        if is_schema_absence_error(e):
            logger.debug(f"{operation}: schema object missing ({e}), treating as absent")
            return None
        raise label_query_failed(operation, e, query=sql, table=table) from e


@dataclass
class QuerySession:
    """State shared by the strategies of one resolution pass.

    Attributes:
        conn: Open, read-only SQLite connection. Never closed here.
        schema: Schema descriptor loaded at the start of the pass.
        labels: Label dictionary (id -> name).
        cancel_event: Event set by the caller to request cancellation.
    """

    conn: sqlite3.Connection
    schema: SchemaDescriptor
    labels: dict[int, str]
    cancel_event: threading.Event | None = None

    def fetch_all(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        operation: str,
        table: str | None = None,
    ) -> list[Any] | None:
        """Fetch every row of a statement, None if the schema object is absent."""
        return run_read(
            self.conn,
            sql,
            params,
            operation=operation,
            cancel_event=self.cancel_event,
            table=table,
        )

    def fetch_one(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        operation: str,
        table: str | None = None,
    ) -> Any | None:
        """Fetch the first row of a statement, None if absent or empty."""
        rows = self.fetch_all(sql, params, operation=operation, table=table)
        if not rows:
            return None
        return rows[0]

    def label_name(self, label_id: int) -> str | None:
        """Look up a label name, None for unknown labels or an empty name."""
        return self.labels.get(label_id) or None
