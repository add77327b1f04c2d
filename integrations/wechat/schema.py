"""Schema probing for exported contact databases.

Export generations differ in which tables and columns carry label data, so
the label engine inspects the live schema instead of assuming a version.

Two layers are provided:

- table_exists / column_exists / columns_exist query a live connection;
- SchemaDescriptor snapshots the table list once per resolution pass and
  caches column sets per table, so strategy selection can also be tested
  against a canned descriptor without a database.

Table and column names are matched case-insensitively, as SQLite resolves
them. The wildcard name search is the exception: it is case-sensitive.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .queries import LINK_TABLE_NAME_HINT, get_query
from .session import run_read

logger = logging.getLogger(__name__)


def list_tables(conn: sqlite3.Connection, cancel_event: threading.Event | None = None) -> list[str]:
    """List the names of all tables in the database, in sqlite_master order."""
    rows = run_read(
        conn,
        get_query("list_tables"),
        operation="list tables",
        cancel_event=cancel_event,
        table="sqlite_master",
    )
    return [row[0] for row in rows or []]


def table_exists(
    conn: sqlite3.Connection, table: str, cancel_event: threading.Event | None = None
) -> bool:
    """Check whether a table exists.

    Args:
        conn: Open SQLite connection.
        table: Table name, compared case-insensitively.
        cancel_event: Event set by the caller to request cancellation.

    Returns:
        True if the table exists. A missing table is never an error.
    """
    rows = run_read(
        conn,
        get_query("table_exists"),
        (table,),
        operation=f"check table {table}",
        cancel_event=cancel_event,
        table=table,
    )
    return bool(rows)


def table_columns(
    conn: sqlite3.Connection, table: str, cancel_event: threading.Event | None = None
) -> frozenset[str]:
    """Get the lowercased column names of a table, empty if the table is absent."""
    rows = run_read(
        conn,
        get_query("table_info", table=table),
        operation=f"inspect table {table}",
        cancel_event=cancel_event,
        table=table,
    )
    # PRAGMA table_info rows: (cid, name, type, notnull, dflt_value, pk)
    return frozenset(str(row[1]).lower() for row in rows or [])


def column_exists(
    conn: sqlite3.Connection,
    table: str,
    column: str,
    cancel_event: threading.Event | None = None,
) -> bool:
    """Check whether a table has a column (case-insensitive)."""
    return columns_exist(conn, table, column, cancel_event=cancel_event)


def columns_exist(
    conn: sqlite3.Connection,
    table: str,
    *columns: str,
    cancel_event: threading.Event | None = None,
) -> bool:
    """Check whether a table exists and has every given column.

    Args:
        conn: Open SQLite connection.
        table: Table name, compared case-insensitively.
        *columns: Column names, compared case-insensitively.
        cancel_event: Event set by the caller to request cancellation.

    Returns:
        True only if the table exists and all columns are present.
    """
    if not table_exists(conn, table, cancel_event):
        return False
    found = table_columns(conn, table, cancel_event)
    return all(column.lower() in found for column in columns)


@dataclass
class SchemaDescriptor:
    """Snapshot of the live schema for one resolution pass.

    The table list is read once when the descriptor is loaded. Column sets
    are read the first time a table is asked about and cached afterwards.

    Attributes:
        tables: Table names in sqlite_master order.
    """

    tables: tuple[str, ...]
    _columns: dict[str, frozenset[str]] = field(default_factory=dict, repr=False)
    _conn: sqlite3.Connection | None = field(default=None, repr=False, compare=False)
    _cancel_event: threading.Event | None = field(default=None, repr=False, compare=False)

    @classmethod
    def load(
        cls, conn: sqlite3.Connection, cancel_event: threading.Event | None = None
    ) -> SchemaDescriptor:
        """Read the table list of a live database."""
        tables = tuple(list_tables(conn, cancel_event))
        logger.debug(f"Schema snapshot: {len(tables)} tables")
        return cls(tables=tables, _conn=conn, _cancel_event=cancel_event)

    @classmethod
    def from_mapping(cls, schema: Mapping[str, Iterable[str]]) -> SchemaDescriptor:
        """Build a descriptor from a table -> columns mapping, without a database."""
        columns = {
            table: frozenset(column.lower() for column in cols) for table, cols in schema.items()
        }
        return cls(tables=tuple(schema), _columns=columns)

    def table_name(self, table: str) -> str | None:
        """Get the stored name of a table, looked up case-insensitively.

        An exact match wins over a case-folded one.
        """
        if table in self.tables:
            return table
        folded = table.lower()
        for name in self.tables:
            if name.lower() == folded:
                return name
        return None

    def has_table(self, table: str) -> bool:
        """Check whether a table exists (case-insensitive)."""
        return self.table_name(table) is not None

    def columns(self, table: str) -> frozenset[str]:
        """Get the lowercased column names of a table, empty if absent."""
        name = self.table_name(table)
        if name is None:
            return frozenset()
        cached = self._columns.get(name)
        if cached is not None:
            return cached
        if self._conn is None:
            return frozenset()
        found = table_columns(self._conn, name, self._cancel_event)
        self._columns[name] = found
        return found

    def has_column(self, table: str, column: str) -> bool:
        """Check whether a table has a column (case-insensitive)."""
        return column.lower() in self.columns(table)

    def has_columns(self, table: str, *columns: str) -> bool:
        """Check whether a table exists and has every given column."""
        if not self.has_table(table):
            return False
        found = self.columns(table)
        return all(column.lower() in found for column in columns)

    def tables_containing(self, substring: str = LINK_TABLE_NAME_HINT) -> list[str]:
        """Tables whose name contains substring (case-sensitive), sorted by name."""
        return sorted(table for table in self.tables if substring in table)
