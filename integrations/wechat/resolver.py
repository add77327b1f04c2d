"""Contact label resolution.

Implements the ContactLabelResolver protocol from contracts/contacts.py.

Loads the label dictionary and a schema snapshot once, then tries each
label strategy in priority order and annotates the contacts with the first
result that labels anyone. Contacts are only modified after a strategy has
been selected, so a hard error leaves every contact untouched.

Example:
    import sqlite3

    from contracts.contacts import Contact
    from integrations.wechat import resolve_contact_labels

    conn = sqlite3.connect("file:contact.db?mode=ro", uri=True)
    contacts = [Contact(identifier="wxid_alice", remark="Alice")]
    report = resolve_contact_labels(conn, contacts)
    print(contacts[0].labels, report.strategy)
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable, MutableSequence, Sequence

from chatlog.config import LabelResolutionConfig, get_config
from chatlog.errors import LabelResolutionError, ResolutionCancelledError
from contracts.contacts import Contact, LabelAssociations, ResolutionReport

from .dictionary import load_labels
from .schema import SchemaDescriptor
from .session import QuerySession
from .strategies import LabelStrategy, StrategyResult, default_strategies

logger = logging.getLogger(__name__)


def dedupe(names: Iterable[str]) -> list[str]:
    """Remove duplicate names, keeping the first occurrence of each."""
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


def annotate_contacts(contacts: Sequence[Contact], associations: LabelAssociations) -> int:
    """Append associated label names to each contact.

    Names already present on a contact are not added again. Contacts with
    no association keep their labels unchanged.

    Args:
        contacts: Contacts to annotate, in caller order.
        associations: Contact identifier -> label names in evidence order.

    Returns:
        Number of contacts with at least one associated name.
    """
    annotated = 0
    for contact in contacts:
        names = associations.get(contact.identifier)
        if not names:
            continue
        existing = set(contact.labels)
        contact.labels.extend(name for name in dedupe(names) if name not in existing)
        annotated += 1
    return annotated


def select_result(
    session: QuerySession,
    contacts: Sequence[Contact],
    strategies: Sequence[LabelStrategy],
) -> StrategyResult | None:
    """Run strategies in order and return the first applicable result."""
    for strategy in strategies:
        result = strategy.try_resolve(session, contacts)
        if result.applicable:
            logger.debug(
                f"Label strategy {strategy.name} matched {len(result.associations)} contacts"
            )
            return result
        logger.debug(f"Label strategy {strategy.name} found nothing, falling through")
    return None


def resolve_contact_labels(
    conn: sqlite3.Connection,
    contacts: MutableSequence[Contact],
    *,
    cancel_event: threading.Event | None = None,
    strategies: Sequence[LabelStrategy] | None = None,
    config: LabelResolutionConfig | None = None,
) -> ResolutionReport:
    """Resolve label names for contacts and append them in place.

    Args:
        conn: Open, read-only SQLite connection. Not closed here.
        contacts: Contacts to annotate.
        cancel_event: Event set by the caller to abort the pass. When given,
            the connection's progress handler is used for the pass and
            cleared afterwards.
        strategies: Strategy chain to use instead of the default one.
        config: Label resolution settings. Defaults to the global config.

    Returns:
        ResolutionReport describing which strategy contributed labels.

    Raises:
        LabelQueryError: If a query fails on a table known to exist.
        ResolutionCancelledError: If cancel_event fires during the pass.
    """
    if not contacts:
        return ResolutionReport()

    if strategies is None:
        strategies = default_strategies(config or get_config().labels)

    try:
        labels = load_labels(conn, cancel_event)
        schema = SchemaDescriptor.load(conn, cancel_event)
        session = QuerySession(conn=conn, schema=schema, labels=labels, cancel_event=cancel_event)
        result = select_result(session, contacts, strategies)
    except ResolutionCancelledError:
        logger.info(f"Label resolution cancelled for {len(contacts)} contacts")
        raise
    except LabelResolutionError as e:
        logger.warning(f"Label resolution aborted: {e.to_dict()}")
        raise

    if result is None:
        logger.debug(f"No label data found for {len(contacts)} contacts")
        return ResolutionReport(labels_loaded=len(labels))

    labelled = annotate_contacts(contacts, result.associations)
    logger.info(
        f"Resolved labels for {labelled}/{len(contacts)} contacts using {result.strategy}"
    )
    return ResolutionReport(
        strategy=result.strategy,
        labels_loaded=len(labels),
        contacts_labelled=labelled,
    )


class ContactLabelResolverImpl:
    """Resolver bound to a fixed strategy chain.

    Implements the ContactLabelResolver protocol for callers that inject
    the resolver rather than calling resolve_contact_labels() directly.
    """

    def __init__(
        self,
        strategies: Sequence[LabelStrategy] | None = None,
        config: LabelResolutionConfig | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            strategies: Strategy chain. Built from config when omitted.
            config: Label resolution settings. Defaults to the global config.
        """
        self.strategies = tuple(strategies or default_strategies(config or get_config().labels))

    def resolve(
        self,
        conn: sqlite3.Connection,
        contacts: MutableSequence[Contact],
        *,
        cancel_event: threading.Event | None = None,
    ) -> ResolutionReport:
        """Append resolved label names to each contact's labels in place."""
        return resolve_contact_labels(
            conn, contacts, cancel_event=cancel_event, strategies=self.strategies
        )
