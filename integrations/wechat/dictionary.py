"""Global label dictionary loading.

The dictionary maps numeric label ids to label names. Every structured
strategy resolves ids through it. An export without the dictionary table
yields an empty dictionary so the heuristic tier can still run.
"""

from __future__ import annotations

import logging
import re
import sqlite3
import threading
from collections.abc import Iterator
from typing import Any

from contracts.contacts import Label

from .queries import LABEL_ID_COLUMN, LABEL_NAME_COLUMN, LABEL_TABLE, get_query
from .session import run_read

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def coerce_label_id(value: Any) -> int | None:
    """Convert a stored label id to int, None if it is not an integer.

    SQLite columns are loosely typed, so ids may come back as int, text
    or float depending on how the export wrote them.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, (str, bytes)):
        text = value.decode("utf-8", "ignore") if isinstance(value, bytes) else value
        text = text.strip()
        if _INTEGER_RE.fullmatch(text):
            return int(text)
    return None


def iter_labels(
    conn: sqlite3.Connection, cancel_event: threading.Event | None = None
) -> Iterator[Label]:
    """Yield every usable label of the dictionary table.

    Rows with a non-integer id or an empty or NULL name are skipped.

    Raises:
        LabelQueryError: If the dictionary table exists but cannot be read.
        ResolutionCancelledError: If the cancel event fired.
    """
    rows = run_read(
        conn,
        get_query(
            "labels",
            id_column=LABEL_ID_COLUMN,
            name_column=LABEL_NAME_COLUMN,
            table=LABEL_TABLE,
        ),
        operation="load labels",
        cancel_event=cancel_event,
        table=LABEL_TABLE,
    )
    if rows is None:
        logger.debug(f"Label dictionary table {LABEL_TABLE} not found, using empty dictionary")
        return

    for row in rows:
        label_id = coerce_label_id(row[0])
        name = row[1]
        if label_id is None or not isinstance(name, str):
            continue
        label = Label(id=label_id, name=name)
        if label.is_usable:
            yield label


def load_labels(
    conn: sqlite3.Connection, cancel_event: threading.Event | None = None
) -> dict[int, str]:
    """Load the whole label dictionary in one query.

    Args:
        conn: Open SQLite connection.
        cancel_event: Event set by the caller to request cancellation.

    Returns:
        Mapping of label id to label name. Empty if the table or its columns
        are missing.

    Raises:
        LabelQueryError: If the dictionary table exists but cannot be read.
        ResolutionCancelledError: If the cancel event fired.
    """
    labels = {label.id: label.name for label in iter_labels(conn, cancel_event)}
    logger.debug(f"Loaded {len(labels)} labels from {LABEL_TABLE}")
    return labels
