"""Conditional create/update of draft records."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from maildesk.application.ports.clock import Clock
from maildesk.application.ports.email_table import (
    KEY_ATTRIBUTE,
    Condition,
    ConditionCheckFailed,
    EmailTable,
)
from maildesk.application.ports.text_generator import TextGenerator
from maildesk.application.text import TextPolicy, derive_text
from maildesk.domain.entities.email_record import EmailContent, EmailKind, EmailRecord
from maildesk.domain.errors import EmailIsNotDraft, RecordNotFound
from maildesk.infrastructure.dynamodb import codec


def unchanged_since_read(record: EmailRecord) -> Condition:
    """Condition that holds while ``record`` is stored exactly as it was read."""
    equals = {KEY_ATTRIBUTE: codec.serialize(record.message_id)}
    must_not_have: frozenset[str] = frozenset()
    if record.version:
        equals[codec.VERSION_ATTRIBUTE] = codec.serialize(record.version)
    else:
        # items written outside this package carry no Version until first saved here
        must_not_have = frozenset({codec.VERSION_ATTRIBUTE})
    return Condition(
        equals=equals,
        begins_with={codec.TYPE_ATTRIBUTE: codec.type_prefix(record.kind)},
        must_not_have=must_not_have,
    )


class DraftStore:
    """Create or update drafts with optimistic concurrency.

    The stored item is read first to learn its kind and version; the write
    is then conditioned on nothing having changed in between. A first save
    is conditioned on the key not existing yet.
    """

    def __init__(self, table: EmailTable, clock: Clock, generate_text: TextGenerator) -> None:
        self.table = table
        self.clock = clock
        self.generate_text = generate_text

    def load(self, message_id: str) -> Optional[EmailRecord]:
        item = self.table.get(message_id)
        if item is None:
            logger.debug(f"No stored email {message_id}")
            return None
        return codec.from_item(item)

    def save_draft(
        self,
        message_id: str,
        content: EmailContent,
        policy: TextPolicy,
        expected_kind: EmailKind = EmailKind.DRAFT,
    ) -> EmailRecord:
        """Persist ``content`` as the draft ``message_id``.

        Raises:
            EmailIsNotDraft: the stored record is not of ``expected_kind``.
            InvalidInput: text could not be derived from the html body.
            RecordNotFound: the record changed between read and write.
            StorageError: any other persistence failure.
        """
        existing = self.load(message_id)
        if existing is not None and existing.kind is not expected_kind:
            logger.warning(f"Refusing to save {message_id}: stored kind is {existing.kind.value}")
            raise EmailIsNotDraft(
                f"email {message_id} is {existing.kind.value}, not {expected_kind.value}",
                details={"message_id": message_id, "kind": existing.kind.value},
            )

        text = derive_text(content.text, content.html, policy, self.generate_text)

        if existing is None:
            condition = Condition(must_not_exist=True)
            version, extra = 0, {}
        else:
            condition = unchanged_since_read(existing)
            version, extra = existing.version, existing.extra

        record = EmailRecord(
            message_id=message_id,
            kind=EmailKind.DRAFT,
            updated_at=self.clock().replace(microsecond=0),
            content=content.with_text(text),
            version=version + 1,
            extra=extra,
        )

        try:
            self.table.put(codec.to_item(record), condition)
        except ConditionCheckFailed:
            logger.warning(f"Draft {message_id} changed concurrently (read version {version})")
            raise RecordNotFound(
                f"draft {message_id} no longer exists in the expected form",
                details={"message_id": message_id, "version": version},
            ) from None

        logger.info(f"Saved draft {message_id} (version {record.version})")
        return record
