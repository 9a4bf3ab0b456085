"""Error taxonomy for the email lifecycle.

Every error carries a machine-readable ``code``; mapping codes to transport
status is left to the caller (see ``maildesk.api.routes``).
"""

from __future__ import annotations

from typing import Any, Optional


class MaildeskError(Exception):
    """Base error for the email lifecycle core."""

    code = "MAILDESK_ERROR"

    def __init__(self, message: str = "", details: Optional[dict[str, Any]] = None):
        self.message = message or self.__class__.__doc__ or self.code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for response."""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidInput(MaildeskError, ValueError):
    """Malformed or missing input."""

    code = "INVALID_INPUT"


class EmailIsNotDraft(MaildeskError):
    """Email is not a draft."""

    code = "EMAIL_IS_NOT_DRAFT"


class RecordNotFound(MaildeskError):
    """Email does not exist in the expected form."""

    code = "RECORD_NOT_FOUND"


class SendFailed(MaildeskError):
    """Email could not be sent."""

    code = "SEND_FAILED"


class StorageError(MaildeskError):
    """Persistence layer failure."""

    code = "STORAGE_ERROR"

    def __init__(
        self,
        message: str = "",
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, details)
        self.cause = cause


class DeadlineExceeded(MaildeskError):
    """Operation did not complete before its deadline."""

    code = "DEADLINE_EXCEEDED"
