"""
Unit tests for the save use case.

Covers the end-to-end draft/sent scenarios against the in-memory table.
"""
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from maildesk.application.drafts import DraftStore, SendOrchestrator
from maildesk.application.use_cases import SaveEmailUseCase, new_draft_id
from maildesk.domain import (
    CreateInput,
    EmailContent,
    EmailIsNotDraft,
    EmailKind,
    EmailRecord,
    InvalidInput,
    SaveInput,
    SendFailed,
    StorageError,
)
from maildesk.infrastructure.dynamodb import codec
from maildesk.infrastructure.html_text import generate_text

from conftest import FIXED_TIME, FakeSender


def build(table, sender, clock, text_generator=generate_text):
    return SaveEmailUseCase(
        DraftStore(table, clock, text_generator),
        SendOrchestrator(table, sender, clock),
    )


class TestSaveWithoutSend:
    """Test saving drafts."""

    def test_returns_draft_with_same_id(self, save_use_case, content):
        result = save_use_case.save(SaveInput("draft-example", content, generate_text="off"))

        assert result.message_id == "draft-example"
        assert result.kind is EmailKind.DRAFT
        assert result.time_updated == "2022-03-16T16:55:45Z"
        assert result.subject == "subject"
        assert result.from_ == ["example@example.com"]
        assert result.to == ["to@example.com", "second@example.com"]
        assert result.text == "text"
        assert result.html == "<p>html</p>"

    def test_auto_generates_missing_text(self, save_use_case):
        content = EmailContent(html="<p>hi</p>")
        result = save_use_case.save(SaveInput("draft-1", content, generate_text="auto"))

        assert result.message_id == "draft-1"
        assert result.kind is EmailKind.DRAFT
        assert result.text == "hi"
        assert result.html == "<p>hi</p>"

    def test_on_overrides_text(self, save_use_case, content):
        result = save_use_case.save(SaveInput("draft-example", content, generate_text="on"))
        assert result.text == "html"

    def test_off_keeps_empty_text(self, save_use_case):
        content = EmailContent(html="<p>hi</p>")
        result = save_use_case.save(SaveInput("draft-1", content, generate_text="off"))
        assert result.text == ""

    def test_empty_id_is_invalid(self, save_use_case, table, content):
        with pytest.raises(InvalidInput):
            save_use_case.save(SaveInput("", content))
        assert len(table) == 0

    def test_unknown_policy_is_invalid(self, save_use_case, table, content):
        with pytest.raises(InvalidInput):
            save_use_case.save(SaveInput("draft-1", content, generate_text="sometimes"))
        assert len(table) == 0

    def test_generation_failure_writes_nothing(self, table, sender, clock):
        def fail(html):
            raise InvalidInput("cannot parse")

        use_case = build(table, sender, clock, text_generator=fail)

        with pytest.raises(InvalidInput):
            use_case.save(SaveInput("draft-1", EmailContent(html="<p>hi</p>"), generate_text="on"))
        assert table.get("draft-1") is None

    def test_save_on_sent_record_is_rejected(self, clock, sender, content):
        sent = EmailRecord("sent-1", EmailKind.SENT, FIXED_TIME, content, version=1)
        table = MagicMock()
        table.get.return_value = codec.to_item(sent)

        with pytest.raises(EmailIsNotDraft):
            build(table, sender, clock).save(SaveInput("sent-1", content))

        table.put.assert_not_called()
        table.transact_write.assert_not_called()
        assert sender.sent == []

    def test_repeated_save_only_changes_timestamp(self, save_use_case, table, clock, content):
        first = save_use_case.save(SaveInput("draft-example", content))
        first_item = table.get("draft-example")

        clock.now = FIXED_TIME + timedelta(hours=1)
        second = save_use_case.save(SaveInput("draft-example", content))
        second_item = table.get("draft-example")

        assert second.time_updated == "2022-03-16T17:55:45Z"
        assert second == type(first)(**{**first.__dict__, "time_updated": second.time_updated})
        changed = {k for k in second_item if second_item[k] != first_item.get(k)}
        assert changed == {"TimeUpdated", "DateTime", "Version"}


class TestSaveWithSend:
    """Test saving and sending in one call."""

    def test_returns_sent_record(self, save_use_case, table, content):
        result = save_use_case.save(SaveInput("draft-example", content, generate_text="auto", send=True))

        assert result.message_id == "sent-message-id"
        assert result.kind is EmailKind.SENT
        assert result.time_updated == "2022-03-16T16:55:45Z"
        assert result.text == "text"
        assert table.get("draft-example") is None
        assert codec.from_item(table.get("sent-message-id")).kind is EmailKind.SENT

    def test_sent_record_carries_saved_text(self, save_use_case, sender):
        content = EmailContent(from_=["a@example.com"], html="<p>html</p>")
        result = save_use_case.save(SaveInput("draft-example", content, generate_text="auto", send=True))

        assert result.text == "html"
        assert sender.sent[0].text == "html"

    def test_send_failure_keeps_saved_draft(self, table, failing_sender, clock, content):
        use_case = build(table, failing_sender, clock)

        with pytest.raises(SendFailed):
            use_case.save(SaveInput("draft-example", content, send=True))

        record = codec.from_item(table.get("draft-example"))
        assert record.kind is EmailKind.DRAFT

    def test_swap_failure_surfaces_transaction_error(self, clock, content):
        error = StorageError("test batch write error")
        table = MagicMock()
        table.get.return_value = None
        table.transact_write.side_effect = error
        sender = FakeSender(prefix="sent-1")

        with pytest.raises(StorageError) as exc:
            build(table, sender, clock).save(SaveInput("draft-example", content, send=True))

        assert exc.value is error
        assert len(sender.sent) == 1

    def test_draft_save_failure_skips_send(self, clock, sender, content):
        table = MagicMock()
        table.get.return_value = None
        table.put.side_effect = StorageError("unavailable")

        with pytest.raises(StorageError):
            build(table, sender, clock).save(SaveInput("draft-example", content, send=True))
        assert sender.sent == []

    def test_sent_record_cannot_be_saved_again(self, save_use_case, content):
        save_use_case.save(SaveInput("draft-example", content, send=True))

        with pytest.raises(EmailIsNotDraft):
            save_use_case.save(SaveInput("sent-message-id", content))


class TestCreate:
    """Test drafts created under generated ids."""

    def test_create_uses_generated_id(self, save_use_case, table, content):
        result = save_use_case.create(CreateInput(content))

        assert result.message_id == "draft-generated"
        assert result.kind is EmailKind.DRAFT
        assert table.get("draft-generated") is not None

    def test_create_and_send(self, save_use_case, table, content):
        result = save_use_case.create(CreateInput(content, send=True))

        assert result.kind is EmailKind.SENT
        assert table.get("draft-generated") is None

    def test_default_ids_are_unique_drafts(self):
        first, second = new_draft_id(), new_draft_id()
        assert first.startswith("draft-")
        assert first != second
