"""Delete a draft that was never sent."""

from __future__ import annotations

from loguru import logger

from maildesk.application.drafts.store import unchanged_since_read
from maildesk.application.ports.email_table import ConditionCheckFailed, EmailTable
from maildesk.application.use_cases.get_email import GetEmailUseCase
from maildesk.domain.errors import EmailIsNotDraft, RecordNotFound


class DiscardDraftUseCase:
    """Remove a draft, refusing sent and received records."""

    def __init__(self, table: EmailTable) -> None:
        self.table = table
        self.reader = GetEmailUseCase(table)

    def discard(self, message_id: str) -> None:
        record = self.reader.get(message_id)
        if not record.is_draft:
            raise EmailIsNotDraft(
                f"email {message_id} is {record.kind.value}, only drafts can be discarded",
                details={"message_id": message_id, "kind": record.kind.value},
            )

        try:
            self.table.delete(message_id, unchanged_since_read(record))
        except ConditionCheckFailed:
            logger.warning(f"Draft {message_id} changed concurrently (read version {record.version}), not discarded")
            raise RecordNotFound(
                f"draft {message_id} no longer exists in the expected form",
                details={"message_id": message_id},
            ) from None
        logger.info(f"Discarded draft {message_id}")
