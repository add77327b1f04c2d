"""Error codes and the chatlog base exception."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Machine-readable identifiers for chatlog failures."""

    # Database errors (DB_*)
    DB_QUERY_FAILED = "DB_QUERY_FAILED"

    # Label resolution errors (LBL_*)
    LBL_RESOLUTION_FAILED = "LBL_RESOLUTION_FAILED"
    LBL_QUERY_FAILED = "LBL_QUERY_FAILED"
    LBL_CANCELLED = "LBL_CANCELLED"

    UNKNOWN = "UNKNOWN"


class ChatlogError(Exception):
    """Base exception for all chatlog errors.

    Subclasses set ``default_message`` and ``default_code``; callers may
    override either and attach structured ``details`` for logging.
    """

    default_message: str = "An error occurred"
    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details: dict[str, Any] = dict(details or {})
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> BaseException | None:
        """The underlying exception, if any."""
        return self.__cause__

    def to_dict(self) -> dict[str, Any]:
        """Flatten the error for structured log records."""
        return {"error": type(self).__name__, "code": self.code.value, **self.details}
