"""Label source strategies.

Three export generations encode "contact X has labels L1..Ln" differently.
Each strategy reads one encoding and reports the associations it found:

1. InlineListStrategy - a comma-separated id list on the contact table.
2. LinkTableStrategy - a (username, label_id_) junction table.
3. HeuristicStrategy - customer markers in the remark or description.

The resolver runs them in that order and keeps the first result that
labels at least one contact.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from chatlog.config import LabelResolutionConfig
from contracts.contacts import Contact, LabelAssociations

from .dictionary import coerce_label_id
from .heuristics import CUSTOMER_LABEL, looks_like_customer
from .queries import (
    CONTACT_TABLE,
    DESCRIPTION_COLUMN,
    LABEL_ID_COLUMN,
    LABEL_ID_LIST_COLUMN,
    LABEL_ID_LIST_DELIMITER,
    LINK_TABLE_CANDIDATES,
    LINK_TABLE_NAME_HINT,
    USERNAME_COLUMN,
    get_query,
)
from .schema import SchemaDescriptor
from .session import QuerySession

logger = logging.getLogger(__name__)


@dataclass
class StrategyResult:
    """Associations found by one strategy.

    Attributes:
        strategy: Name of the strategy that produced the result.
        associations: Contact identifier -> label names in evidence order.
    """

    strategy: str
    associations: LabelAssociations = field(default_factory=dict)

    @property
    def applicable(self) -> bool:
        """Whether any contact received at least one label name."""
        return any(self.associations.values())

    def add(self, identifier: str, name: str) -> None:
        """Record one piece of label evidence for a contact."""
        self.associations.setdefault(identifier, []).append(name)


class LabelStrategy(Protocol):
    """A single source of contact label evidence."""

    name: str

    def try_resolve(self, session: QuerySession, contacts: Sequence[Contact]) -> StrategyResult:
        """Collect label associations, empty if this encoding is not present."""
        ...


def label_id_list_text(value: Any) -> str | None:
    """Render a stored LabelIDList value as text, None for NULL.

    Columns with numeric affinity store a single-id list as an integer, so
    non-text values are converted the way they would print.
    """
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", "ignore")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def split_label_ids(raw: str | None) -> list[int]:
    """Parse a LabelIDList value into positive label ids.

    Tokens are separated by commas and stripped. Tokens that are not plain
    decimal numbers, or are not positive, are dropped.

    Args:
        raw: Raw column value, possibly None.

    Returns:
        Label ids in the order they appear.
    """
    if not raw:
        return []
    ids: list[int] = []
    for token in raw.split(LABEL_ID_LIST_DELIMITER):
        token = token.strip()
        if not (token.isascii() and token.isdigit()):
            continue
        label_id = int(token)
        if label_id > 0:
            ids.append(label_id)
    return ids


class InlineListStrategy:
    """Read label ids from the LabelIDList column of the contact table."""

    name = "inline_list"

    def try_resolve(self, session: QuerySession, contacts: Sequence[Contact]) -> StrategyResult:
        result = StrategyResult(self.name)
        table = session.schema.table_name(CONTACT_TABLE)
        if table is None or not session.schema.has_column(table, LABEL_ID_LIST_COLUMN):
            logger.debug(f"{CONTACT_TABLE}.{LABEL_ID_LIST_COLUMN} not present, skipping")
            return result

        rows = session.fetch_all(
            get_query(
                "inline_label_ids",
                user_column=USERNAME_COLUMN,
                list_column=LABEL_ID_LIST_COLUMN,
                table=table,
            ),
            operation="query label id list",
            table=table,
        )
        for username, raw in rows or []:
            text = label_id_list_text(raw)
            if username is None or text is None or not text.strip():
                continue
            for label_id in split_label_ids(text):
                name = session.label_name(label_id)
                if name is not None:
                    result.add(str(username), name)
        return result


@dataclass(frozen=True)
class LinkTable:
    """A junction table associating contacts with label ids.

    Attributes:
        table: Table name.
        user_column: Column holding the contact identifier.
        label_column: Column holding the label id.
    """

    table: str
    user_column: str = USERNAME_COLUMN
    label_column: str = LABEL_ID_COLUMN


def detect_link_table(
    schema: SchemaDescriptor,
    candidates: Sequence[str] = LINK_TABLE_CANDIDATES,
    *,
    wildcard_search: bool = True,
) -> LinkTable | None:
    """Find the junction table of this export, if any.

    Known candidate names are tried first, in priority order, matched
    case-insensitively. When none of
    them exposes both expected columns, tables whose name contains "label"
    are tried in name order.

    Args:
        schema: Schema descriptor of the database.
        candidates: Known junction table names, highest priority first.
        wildcard_search: Whether to fall back to the name search.

    Returns:
        The first table with both columns, or None.
    """
    for candidate in candidates:
        table = schema.table_name(candidate)
        if table is not None and schema.has_columns(table, USERNAME_COLUMN, LABEL_ID_COLUMN):
            return LinkTable(table)

    if not wildcard_search:
        return None

    tried = {candidate.lower() for candidate in candidates}
    for table in schema.tables_containing(LINK_TABLE_NAME_HINT):
        if table.lower() in tried:
            continue
        if schema.has_columns(table, USERNAME_COLUMN, LABEL_ID_COLUMN):
            return LinkTable(table)
    return None


class LinkTableStrategy:
    """Read (username, label_id_) rows from a junction table."""

    name = "link_table"

    def __init__(
        self,
        candidates: Sequence[str] = LINK_TABLE_CANDIDATES,
        *,
        wildcard_search: bool = True,
    ) -> None:
        """Initialize the strategy.

        Args:
            candidates: Known junction table names, highest priority first.
            wildcard_search: Whether to scan other tables named like "label".
        """
        self.candidates = tuple(candidates)
        self.wildcard_search = wildcard_search

    def try_resolve(self, session: QuerySession, contacts: Sequence[Contact]) -> StrategyResult:
        result = StrategyResult(self.name)
        link = detect_link_table(
            session.schema, self.candidates, wildcard_search=self.wildcard_search
        )
        if link is None:
            logger.debug("No label link table found")
            return result

        logger.debug(f"Using label link table {link.table}")
        rows = session.fetch_all(
            get_query(
                "link_rows",
                user_column=link.user_column,
                label_column=link.label_column,
                table=link.table,
            ),
            operation="query label link table",
            table=link.table,
        )
        for username, raw_id in rows or []:
            label_id = coerce_label_id(raw_id)
            if username is None or label_id is None:
                continue
            name = session.label_name(label_id)
            if name is not None:
                result.add(str(username), name)
        return result


class HeuristicStrategy:
    """Tag customers found through remark or description markers."""

    name = "heuristic"

    def try_resolve(self, session: QuerySession, contacts: Sequence[Contact]) -> StrategyResult:
        result = StrategyResult(self.name)
        table = session.schema.table_name(CONTACT_TABLE)
        has_description = table is not None and session.schema.has_column(
            table, DESCRIPTION_COLUMN
        )
        query = get_query(
            "description",
            description_column=DESCRIPTION_COLUMN,
            table=table or CONTACT_TABLE,
            user_column=USERNAME_COLUMN,
        )

        for contact in contacts:
            if looks_like_customer(contact.remark):
                result.add(contact.identifier, CUSTOMER_LABEL)
                continue
            if not has_description:
                continue
            row = session.fetch_one(
                query,
                (contact.identifier,),
                operation="query description",
                table=table,
            )
            if row is None:
                continue
            description = row[0]
            if isinstance(description, str) and looks_like_customer(description):
                result.add(contact.identifier, CUSTOMER_LABEL)
        return result


def default_strategies(config: LabelResolutionConfig | None = None) -> tuple[LabelStrategy, ...]:
    """Build the strategy chain in priority order.

    Args:
        config: Label resolution settings. Defaults enable every tier.

    Returns:
        Strategies to try, highest priority first.
    """
    config = config or LabelResolutionConfig()
    strategies: list[LabelStrategy] = [
        InlineListStrategy(),
        LinkTableStrategy(wildcard_search=config.wildcard_search),
    ]
    if config.heuristic_fallback:
        strategies.append(HeuristicStrategy())
    return tuple(strategies)
