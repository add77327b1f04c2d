"""Pytest configuration for chatlog tests.

Provides in-memory contact databases for each export generation and
isolates the global configuration singleton between tests.
"""

import sqlite3
from collections.abc import Iterator

import pytest

from chatlog.config import reset_config
from tests.helpers import exec_all


@pytest.fixture
def memory_db() -> Iterator[sqlite3.Connection]:
    """Provide an empty in-memory SQLite database."""
    conn = sqlite3.connect(":memory:")
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def inline_list_db(memory_db: sqlite3.Connection) -> sqlite3.Connection:
    """Export generation that stores label ids in contact.LabelIDList."""
    exec_all(
        memory_db,
        "CREATE TABLE contact (username TEXT, LabelIDList TEXT, remark TEXT, description TEXT)",
        "CREATE TABLE contact_label (label_id_ INTEGER, label_name_ TEXT)",
        "INSERT INTO contact_label(label_id_, label_name_) VALUES (1, '客户'), (2, 'VIP')",
        "INSERT INTO contact(username, LabelIDList, remark) "
        "VALUES ('alice', '1,2', 'Alice'), ('bob', NULL, 'Bob')",
    )
    return memory_db


@pytest.fixture
def link_table_db(memory_db: sqlite3.Connection) -> sqlite3.Connection:
    """Export generation that stores labels in the rcontact_label junction table."""
    exec_all(
        memory_db,
        "CREATE TABLE contact (username TEXT, remark TEXT)",
        "CREATE TABLE contact_label (label_id_ INTEGER, label_name_ TEXT)",
        "CREATE TABLE rcontact_label (username TEXT, label_id_ INTEGER)",
        "INSERT INTO contact_label(label_id_, label_name_) VALUES (1, '朋友'), (2, '供应商')",
        "INSERT INTO rcontact_label(username, label_id_) "
        "VALUES ('carol', 1), ('dave', 2), ('dave', 1)",
    )
    return memory_db


@pytest.fixture
def heuristic_db(memory_db: sqlite3.Connection) -> sqlite3.Connection:
    """Export generation with no structured label data."""
    exec_all(
        memory_db,
        "CREATE TABLE contact (username TEXT, remark TEXT, description TEXT)",
        "INSERT INTO contact(username, remark, description) VALUES "
        "('eva', '张三-客户', NULL), ('frank', '', '潜在客户'), ('gina', '', ''), "
        "('hank', '', 'Key CUSTOMER since 2019')",
    )
    return memory_db


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch) -> Iterator[None]:
    """Point the config singleton at a temporary file for every test."""
    monkeypatch.setattr("chatlog.config.CONFIG_PATH", tmp_path / "config.json")
    reset_config()
    yield
    reset_config()
