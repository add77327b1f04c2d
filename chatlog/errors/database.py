"""Database and label resolution error classes.

Contains errors raised while reading an exported contact database.
Missing tables and columns are never represented here: they are expected
schema variants and are handled by falling through to the next strategy.
"""

from __future__ import annotations

from typing import Any

from chatlog.errors.base import ChatlogError, ErrorCode

# Database Errors


class DatabaseError(ChatlogError):
    """Base class for database read failures."""

    default_message = "Database error"
    default_code = ErrorCode.DB_QUERY_FAILED

    def __init__(
        self,
        message: str | None = None,
        *,
        table: str | None = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = dict(details or {})
        if table:
            details["table"] = table
        super().__init__(message, code=code, details=details, cause=cause)


# Label Resolution Errors


class LabelResolutionError(DatabaseError):
    """Base class for hard failures of a contact label resolution pass."""

    default_message = "Contact label resolution failed"
    default_code = ErrorCode.LBL_RESOLUTION_FAILED

    def __init__(
        self,
        message: str | None = None,
        *,
        operation: str | None = None,
        table: str | None = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = dict(details or {})
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, table=table, code=code, details=details, cause=cause)


class LabelQueryError(LabelResolutionError):
    """Raised when a query against a confirmed table or column fails."""

    default_message = "Label query failed"
    default_code = ErrorCode.LBL_QUERY_FAILED

    def __init__(
        self,
        message: str | None = None,
        *,
        operation: str | None = None,
        query: str | None = None,
        table: str | None = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        details = dict(details or {})
        if query is not None:
            query = " ".join(query.split())
            details["query_preview"] = query[:200] + "..." if len(query) > 200 else query
        super().__init__(
            message,
            operation=operation,
            table=table,
            code=code,
            details=details,
            cause=cause,
        )


class ResolutionCancelledError(LabelResolutionError):
    """Raised when the caller's cancel event fires during resolution."""

    default_message = "Contact label resolution cancelled"
    default_code = ErrorCode.LBL_CANCELLED
