"""
Unit tests for the draft store.

Tests the read, kind check and conditional write protocol.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from maildesk.application.drafts import DraftStore
from maildesk.application.ports.email_table import Condition, ConditionCheckFailed
from maildesk.application.text import TextPolicy
from maildesk.domain import (
    EmailContent,
    EmailIsNotDraft,
    EmailKind,
    EmailRecord,
    InvalidInput,
    RecordNotFound,
    StorageError,
)
from maildesk.infrastructure.dynamodb import codec
from maildesk.infrastructure.html_text import generate_text
from maildesk.infrastructure.memory import InMemoryEmailTable

from conftest import FIXED_TIME


def stored(table, kind, message_id="draft-example", version=1, extra=None):
    record = EmailRecord(
        message_id=message_id,
        kind=kind,
        updated_at=FIXED_TIME,
        content=EmailContent(subject="old"),
        version=version,
        extra=extra or {},
    )
    table.put(codec.to_item(record), Condition(must_not_exist=True))
    return record


class TestSaveDraft:
    """Test draft creation and update."""

    def test_first_save_creates_draft(self, draft_store, table, content):
        record = draft_store.save_draft("draft-example", content, TextPolicy.OFF)

        assert record.message_id == "draft-example"
        assert record.kind is EmailKind.DRAFT
        assert record.updated_at == FIXED_TIME
        assert record.version == 1
        assert record.content == content
        assert codec.from_item(table.get("draft-example")) == record

    def test_update_bumps_version(self, draft_store, table, content):
        stored(table, EmailKind.DRAFT, version=4)

        record = draft_store.save_draft("draft-example", content, TextPolicy.OFF)

        assert record.version == 5
        assert codec.from_item(table.get("draft-example")).content.subject == "subject"

    def test_update_keeps_passthrough_attributes(self, draft_store, table, content):
        attachments = {"L": [{"M": {"Filename": {"S": "a.pdf"}}}]}
        stored(table, EmailKind.DRAFT, extra={"Attachments": attachments})

        record = draft_store.save_draft("draft-example", content, TextPolicy.OFF)

        assert record.extra == {"Attachments": attachments}
        assert table.get("draft-example")["Attachments"] == attachments

    def test_updated_at_truncated_to_seconds(self, draft_store, clock, content):
        clock.now = FIXED_TIME + timedelta(microseconds=123456)
        record = draft_store.save_draft("draft-example", content, TextPolicy.OFF)
        assert record.updated_at == FIXED_TIME

    def test_text_generated_per_policy(self, draft_store, content):
        record = draft_store.save_draft("draft-example", content, TextPolicy.ON)
        assert record.content.text == "html"

    @pytest.mark.parametrize("kind", [EmailKind.SENT, EmailKind.RECEIVED])
    def test_non_draft_is_rejected_without_write(self, clock, content, kind):
        existing = codec.to_item(EmailRecord("draft-example", kind, FIXED_TIME, EmailContent()))
        table = MagicMock()
        table.get.return_value = existing
        store = DraftStore(table, clock, generate_text)

        with pytest.raises(EmailIsNotDraft):
            store.save_draft("draft-example", content, TextPolicy.OFF)
        table.put.assert_not_called()

    def test_generation_failure_writes_nothing(self, table, clock, content):
        def fail(html):
            raise InvalidInput("cannot parse")

        store = DraftStore(table, clock, fail)

        with pytest.raises(InvalidInput):
            store.save_draft("draft-example", content, TextPolicy.ON)
        assert table.get("draft-example") is None

    def test_first_save_condition(self, clock, content):
        table = MagicMock()
        table.get.return_value = None
        DraftStore(table, clock, generate_text).save_draft("draft-example", content, TextPolicy.OFF)

        item, condition = table.put.call_args.args
        assert item["MessageID"] == {"S": "draft-example"}
        assert condition == Condition(must_not_exist=True)

    def test_update_condition_pins_read_version(self, clock, content):
        existing = EmailRecord("draft-example", EmailKind.DRAFT, FIXED_TIME, EmailContent(), version=7)
        table = MagicMock()
        table.get.return_value = codec.to_item(existing)
        DraftStore(table, clock, generate_text).save_draft("draft-example", content, TextPolicy.OFF)

        _, condition = table.put.call_args.args
        assert condition.equals == {"MessageID": {"S": "draft-example"}, "Version": {"N": "7"}}
        assert condition.begins_with == {"TypeYearMonth": "draft#"}

    def test_unversioned_item_requires_version_absent(self, clock, content):
        item = {"MessageID": {"S": "draft-example"}, "TypeYearMonth": {"S": "draft#2022-03"}}
        table = MagicMock()
        table.get.return_value = item
        DraftStore(table, clock, generate_text).save_draft("draft-example", content, TextPolicy.OFF)

        _, condition = table.put.call_args.args
        assert condition.equals == {"MessageID": {"S": "draft-example"}}
        assert condition.must_not_have == frozenset({"Version"})

    def test_condition_failure_is_record_not_found(self, clock, content):
        table = MagicMock()
        table.get.return_value = None
        table.put.side_effect = ConditionCheckFailed("conditional check failed")

        with pytest.raises(RecordNotFound):
            DraftStore(table, clock, generate_text).save_draft("draft-example", content, TextPolicy.OFF)

    def test_storage_error_propagates_unchanged(self, clock, content):
        error = StorageError("throughput exceeded")
        table = MagicMock()
        table.get.return_value = None
        table.put.side_effect = error

        with pytest.raises(StorageError) as exc:
            DraftStore(table, clock, generate_text).save_draft("draft-example", content, TextPolicy.OFF)
        assert exc.value is error


class BarrierTable(InMemoryEmailTable):
    """Holds every reader until all parties have read."""

    def __init__(self, parties):
        super().__init__()
        self.barrier = threading.Barrier(parties, timeout=5)

    def get(self, message_id):
        item = super().get(message_id)
        self.barrier.wait()
        return item


class TestConcurrentSaves:
    """Test two saves racing on the same draft."""

    @pytest.mark.parametrize("preexisting", ["none", "versioned", "unversioned"])
    def test_exactly_one_save_wins(self, clock, content, preexisting):
        table = BarrierTable(parties=2)
        if preexisting == "versioned":
            stored(table, EmailKind.DRAFT)
        elif preexisting == "unversioned":
            table.put(
                {"MessageID": {"S": "draft-example"}, "TypeYearMonth": {"S": "draft#2022-03"}},
                Condition(must_not_exist=True),
            )
        store = DraftStore(table, clock, generate_text)

        def attempt(subject):
            try:
                return store.save_draft("draft-example", EmailContent(subject=subject), TextPolicy.OFF)
            except RecordNotFound as e:
                return e

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(attempt, ["first", "second"]))

        winners = [r for r in results if isinstance(r, EmailRecord)]
        losers = [r for r in results if isinstance(r, RecordNotFound)]
        assert len(winners) == 1
        assert len(losers) == 1
        final = InMemoryEmailTable.get(table, "draft-example")
        assert codec.from_item(final).content.subject == winners[0].content.subject
