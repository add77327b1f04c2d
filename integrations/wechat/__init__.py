"""Exported WeChat contact database integration.

Resolves contact label names from a decrypted, read-only contact database
whose layout varies between export generations.

Example:
    from integrations.wechat import resolve_contact_labels

    report = resolve_contact_labels(conn, contacts)
    for contact in contacts:
        print(contact.identifier, contact.labels)
"""

from .dictionary import load_labels
from .heuristics import CUSTOMER_LABEL, looks_like_customer
from .resolver import (
    ContactLabelResolverImpl,
    annotate_contacts,
    dedupe,
    resolve_contact_labels,
)
from .schema import SchemaDescriptor, column_exists, columns_exist, table_exists
from .strategies import (
    HeuristicStrategy,
    InlineListStrategy,
    LinkTableStrategy,
    StrategyResult,
    default_strategies,
    detect_link_table,
)

__all__ = [
    "CUSTOMER_LABEL",
    "ContactLabelResolverImpl",
    "HeuristicStrategy",
    "InlineListStrategy",
    "LinkTableStrategy",
    "SchemaDescriptor",
    "StrategyResult",
    "annotate_contacts",
    "column_exists",
    "columns_exist",
    "dedupe",
    "default_strategies",
    "detect_link_table",
    "load_labels",
    "looks_like_customer",
    "resolve_contact_labels",
    "table_exists",
]
