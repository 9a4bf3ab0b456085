"""Send a draft and atomically replace it with its sent record."""

from __future__ import annotations

from loguru import logger

from maildesk.application.drafts.store import unchanged_since_read
from maildesk.application.ports.clock import Clock
from maildesk.application.ports.email_sender import EmailSender
from maildesk.application.ports.email_table import (
    Condition,
    ConditionCheckFailed,
    DeleteOp,
    EmailTable,
    PutOp,
)
from maildesk.domain.entities.email_record import EmailKind, EmailRecord
from maildesk.domain.errors import EmailIsNotDraft, MaildeskError, RecordNotFound, SendFailed
from maildesk.infrastructure.dynamodb import codec


class SendOrchestrator:
    """Dispatch a draft, then swap it for a sent record in one transaction.

    The external send cannot be undone. If the swap fails after a successful
    send, the error is raised as-is and the draft stays in place; the email
    is out but not recorded as sent until someone re-saves it.
    """

    def __init__(self, table: EmailTable, sender: EmailSender, clock: Clock) -> None:
        self.table = table
        self.sender = sender
        self.clock = clock

    def send_and_replace(self, draft: EmailRecord) -> EmailRecord:
        if not draft.is_draft:
            raise EmailIsNotDraft(
                f"email {draft.message_id} is {draft.kind.value}, only drafts can be sent",
                details={"message_id": draft.message_id},
            )

        sent_id = self.sender.send(draft.content)
        if not sent_id or sent_id == draft.message_id:
            raise SendFailed(
                f"send backend returned an unusable id {sent_id!r} for {draft.message_id}",
                details={"message_id": draft.message_id, "sent_id": sent_id},
            )
        logger.info(f"Sent draft {draft.message_id} as {sent_id}")

        sent = EmailRecord(
            message_id=sent_id,
            kind=EmailKind.SENT,
            updated_at=self.clock().replace(microsecond=0),
            content=draft.content,
            version=1,
            extra=draft.extra,
        )

        try:
            self.table.transact_write(
                [
                    DeleteOp(draft.message_id, unchanged_since_read(draft)),
                    PutOp(codec.to_item(sent), Condition(must_not_exist=True)),
                ]
            )
        except ConditionCheckFailed:
            logger.error(
                f"Email {sent_id} was sent but draft {draft.message_id} changed concurrently; "
                "sent record not stored"
            )
            raise RecordNotFound(
                f"draft {draft.message_id} no longer exists in the expected form",
                details={"message_id": draft.message_id, "sent_id": sent_id},
            ) from None
        except MaildeskError as e:
            logger.error(f"Email {sent_id} was sent but replacing draft {draft.message_id} failed: {e}")
            raise

        logger.info(f"Replaced draft {draft.message_id} with sent record {sent_id}")
        return sent
