"""Unified exception hierarchy for chatlog.

Exception Hierarchy:
    ChatlogError (base)
    +-- DatabaseError - Database read failures
        +-- LabelResolutionError - Contact label resolution failures
            +-- LabelQueryError - Query failed on a table known to exist
            +-- ResolutionCancelledError - Caller cancelled the pass

Usage:
    from chatlog.errors import LabelResolutionError

    try:
        resolve_contact_labels(conn, contacts)
    except LabelResolutionError as e:
        logger.error("Label resolution failed: %s (code: %s)", e.message, e.code)
"""

# --- base ---
from chatlog.errors.base import ChatlogError, ErrorCode

# --- database errors ---
from chatlog.errors.database import (
    DatabaseError,
    LabelQueryError,
    LabelResolutionError,
    ResolutionCancelledError,
)

# --- convenience factories ---
from chatlog.errors.factories import (
    label_query_failed,
    resolution_cancelled,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Base exception
    "ChatlogError",
    # Database errors
    "DatabaseError",
    "LabelResolutionError",
    "LabelQueryError",
    "ResolutionCancelledError",
    # Convenience functions
    "label_query_failed",
    "resolution_cancelled",
]
