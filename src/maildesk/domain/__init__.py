"""Domain entities and errors."""

from maildesk.domain.entities.email_record import EmailContent, EmailKind, EmailRecord
from maildesk.domain.entities.save import CreateInput, SaveInput, SaveResult, format_time
from maildesk.domain.errors import (
    DeadlineExceeded,
    EmailIsNotDraft,
    InvalidInput,
    MaildeskError,
    RecordNotFound,
    SendFailed,
    StorageError,
)

__all__ = [
    "EmailKind",
    "EmailContent",
    "EmailRecord",
    "SaveInput",
    "CreateInput",
    "SaveResult",
    "format_time",
    "MaildeskError",
    "InvalidInput",
    "EmailIsNotDraft",
    "RecordNotFound",
    "SendFailed",
    "StorageError",
    "DeadlineExceeded",
]
