from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


class EmailKind(str, Enum):
    """Lifecycle kind of a stored email."""

    DRAFT = "draft"
    SENT = "sent"
    RECEIVED = "received"


@dataclass(frozen=True)
class EmailContent:
    subject: str = ""
    from_: list[str] = field(default_factory=list)
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    reply_to: list[str] = field(default_factory=list)
    text: str = ""
    html: str = ""

    def with_text(self, text: str) -> EmailContent:
        return replace(self, text=text)


@dataclass(frozen=True)
class EmailRecord:
    message_id: str
    kind: EmailKind
    updated_at: datetime
    content: EmailContent
    version: int = 0
    # raw attribute values we don't interpret (attachments, thread links, ...)
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_draft(self) -> bool:
        return self.kind is EmailKind.DRAFT
