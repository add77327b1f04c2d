"""Convenience factory functions for common error scenarios.

Provides shorthand functions for creating commonly-used error instances
with appropriate error codes and details pre-filled.
"""

from __future__ import annotations

from chatlog.errors.database import LabelQueryError, ResolutionCancelledError


def label_query_failed(
    operation: str,
    cause: Exception,
    *,
    query: str | None = None,
    table: str | None = None,
) -> LabelQueryError:
    """Create a LabelQueryError prefixed with the failing operation name."""
    return LabelQueryError(
        f"{operation}: {cause}",
        operation=operation,
        query=query,
        table=table,
        cause=cause,
    )


def resolution_cancelled(
    operation: str | None = None, cause: Exception | None = None
) -> ResolutionCancelledError:
    """Create a ResolutionCancelledError for an interrupted operation."""
    message = f"{operation}: cancelled" if operation else None
    return ResolutionCancelledError(message, operation=operation, cause=cause)
