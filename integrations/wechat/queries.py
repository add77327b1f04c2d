"""SQL queries for contact label resolution.

Handles the naming differences between export generations of the contact
database. Table and column names substituted into templates come from the
constants below or from sqlite_master, and are always quoted with
quote_identifier(). Contact identifiers are passed as query parameters.
"""

from __future__ import annotations

# Label dictionary
LABEL_TABLE = "contact_label"
LABEL_ID_COLUMN = "label_id_"
LABEL_NAME_COLUMN = "label_name_"

# Contact table
CONTACT_TABLE = "contact"
USERNAME_COLUMN = "username"
LABEL_ID_LIST_COLUMN = "LabelIDList"
DESCRIPTION_COLUMN = "description"

# Separator used by LabelIDList
LABEL_ID_LIST_DELIMITER = ","

# Known junction tables, highest priority first
LINK_TABLE_CANDIDATES: tuple[str, ...] = (
    "rcontact_label",
    "contact_label_map",
    "contact2label",
)

# Substring that marks a table as a possible junction table in the wildcard search
LINK_TABLE_NAME_HINT = "label"

_QUERIES = {
    "list_tables": """
        SELECT name FROM sqlite_master WHERE type = 'table'
    """,
    "table_exists": """
        SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ? COLLATE NOCASE
    """,
    "table_info": """
        PRAGMA table_info({table})
    """,
    "labels": """
        SELECT {id_column}, {name_column} FROM {table}
    """,
    "inline_label_ids": """
        SELECT {user_column}, {list_column} FROM {table}
    """,
    "link_rows": """
        SELECT {user_column}, {label_column} FROM {table}
    """,
    "description": """
        SELECT {description_column} FROM {table} WHERE {user_column} = ? LIMIT 1
    """,
}


def quote_identifier(name: str) -> str:
    """Quote an SQLite identifier so it can be substituted into a query.

    Grave accents are used instead of double quotes: SQLite treats an
    unknown double-quoted identifier as a string literal, which would hide
    a missing column.

    Args:
        name: Table or column name.

    Returns:
        The name wrapped in grave accents with embedded accents doubled.
    """
    return "`" + name.replace("`", "``") + "`"


def get_query(name: str, **identifiers: str) -> str:
    """Get an SQL query with the given identifiers substituted.

    Args:
        name: Query name (list_tables, table_exists, table_info, labels,
            inline_label_ids, link_rows, description).
        **identifiers: Table and column names for the template placeholders.
            Each value is quoted before substitution.

    Returns:
        SQL query string.

    Raises:
        KeyError: If the query name or a required placeholder is unknown.
    """
    template = _QUERIES[name]
    quoted = {key: quote_identifier(value) for key, value in identifiers.items()}
    return template.format(**quoted).strip()
