"""Contract interfaces for chatlog.

This module exports the dataclasses and Protocol interfaces shared between
the export pipeline and the label engine.
"""

from contracts.contacts import (
    Contact,
    ContactLabelResolver,
    Label,
    LabelAssociations,
    ResolutionReport,
)

__all__ = [
    "Contact",
    "ContactLabelResolver",
    "Label",
    "LabelAssociations",
    "ResolutionReport",
]
