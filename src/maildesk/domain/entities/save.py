from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from maildesk.domain.entities.email_record import EmailContent, EmailKind, EmailRecord

TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_time(when: datetime) -> str:
    """Render a UTC timestamp as ISO-8601 with a trailing ``Z``."""
    return when.strftime(TIME_FORMAT)


@dataclass(frozen=True)
class SaveInput:
    message_id: str
    content: EmailContent = field(default_factory=EmailContent)
    generate_text: str = "off"  # off | on | auto
    send: bool = False


@dataclass(frozen=True)
class CreateInput:
    content: EmailContent = field(default_factory=EmailContent)
    generate_text: str = "off"
    send: bool = False


@dataclass(frozen=True)
class SaveResult:
    message_id: str
    kind: EmailKind
    time_updated: str
    subject: str
    from_: list[str]
    to: list[str]
    cc: list[str]
    bcc: list[str]
    reply_to: list[str]
    text: str
    html: str

    @classmethod
    def from_record(cls, record: EmailRecord) -> SaveResult:
        c = record.content
        return cls(
            message_id=record.message_id,
            kind=record.kind,
            time_updated=format_time(record.updated_at),
            subject=c.subject,
            from_=list(c.from_),
            to=list(c.to),
            cc=list(c.cc),
            bcc=list(c.bcc),
            reply_to=list(c.reply_to),
            text=c.text,
            html=c.html,
        )
