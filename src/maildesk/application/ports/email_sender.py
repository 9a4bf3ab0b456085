from __future__ import annotations

from typing import Protocol

from maildesk.domain.entities.email_record import EmailContent


class EmailSender(Protocol):
    def send(self, content: EmailContent) -> str:
        """Dispatch the email and return the identifier assigned on acceptance."""
        ...
