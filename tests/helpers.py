"""Shared helpers for chatlog tests."""

import sqlite3

from contracts.contacts import Contact


def exec_all(conn: sqlite3.Connection, *statements: str) -> None:
    """Execute DDL/DML statements against a test database."""
    for stmt in statements:
        conn.execute(stmt)
    conn.commit()


def make_contacts(*identifiers: str, remarks: dict[str, str] | None = None) -> list[Contact]:
    """Build contacts with empty labels, optionally with remarks."""
    remarks = remarks or {}
    return [Contact(identifier=ident, remark=remarks.get(ident, "")) for ident in identifiers]


def labels_by_id(contacts: list[Contact]) -> dict[str, list[str]]:
    """Map each contact identifier to its labels."""
    return {contact.identifier: contact.labels for contact in contacts}
