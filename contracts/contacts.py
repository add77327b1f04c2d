"""Contact label interfaces.

The label engine in integrations/wechat implements against these contracts.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import MutableSequence
from dataclasses import dataclass, field
from typing import Protocol

# Contact identifier -> label names in evidence order (not yet deduplicated)
LabelAssociations = dict[str, list[str]]


@dataclass(frozen=True)
class Label:
    """A named contact tag from the global label dictionary.

    Attributes:
        id: Numeric label id. Ids need not be contiguous.
        name: Display name. An empty name means the label is never attached.
    """

    id: int
    name: str

    @property
    def is_usable(self) -> bool:
        """Whether the label has a non-empty name."""
        return bool(self.name)


@dataclass
class Contact:
    """Contact record owned by the export pipeline.

    Only ``labels`` is written by the label engine. It is appended to and
    never replaced.

    Attributes:
        identifier: Stable primary key (username-like handle).
        remark: Display remark set by the account owner, possibly empty.
        labels: Resolved label names, each at most once.
        nickname: Self-chosen display name of the contact.
        alias: Secondary handle, if any.
    """

    identifier: str
    remark: str = ""
    labels: list[str] = field(default_factory=list)
    nickname: str = ""
    alias: str = ""

    def __post_init__(self) -> None:
        """Normalize a missing remark to the empty string."""
        if self.remark is None:
            self.remark = ""


@dataclass
class ResolutionReport:
    """Summary of one label resolution pass.

    Attributes:
        strategy: Name of the strategy that contributed labels, or None.
        labels_loaded: Number of usable entries in the label dictionary.
        contacts_labelled: Number of contacts that received at least one label.
    """

    strategy: str | None = None
    labels_loaded: int = 0
    contacts_labelled: int = 0


class ContactLabelResolver(Protocol):
    """Interface for annotating contacts with their label names."""

    def resolve(
        self,
        conn: sqlite3.Connection,
        contacts: MutableSequence[Contact],
        *,
        cancel_event: threading.Event | None = None,
    ) -> ResolutionReport:
        """Append resolved label names to each contact's labels in place."""
        ...
