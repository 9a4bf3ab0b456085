"""
Pytest fixtures for Maildesk tests.
"""
import itertools
import threading
from datetime import datetime, timezone

import pytest

from maildesk.application.drafts import DraftStore, SendOrchestrator
from maildesk.application.use_cases import SaveEmailUseCase
from maildesk.domain import EmailContent, SendFailed
from maildesk.infrastructure.html_text import generate_text
from maildesk.infrastructure.memory import InMemoryEmailTable

FIXED_TIME = datetime(2022, 3, 16, 16, 55, 45, tzinfo=timezone.utc)


class FakeSender:
    """Records sends and hands out sequential ids."""

    def __init__(self, prefix="sent-message-id", error=None):
        self.prefix = prefix
        self.error = error
        self.sent = []
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def send(self, content):
        if self.error is not None:
            raise self.error
        with self._lock:
            self.sent.append(content)
            n = next(self._counter)
        return self.prefix if n == 1 else f"{self.prefix}-{n}"


class FakeClock:
    """Clock pinned to a settable instant."""

    def __init__(self, now=FIXED_TIME):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def table():
    return InMemoryEmailTable()


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def failing_sender():
    return FakeSender(error=SendFailed("test send error"))


@pytest.fixture
def draft_store(table, clock):
    return DraftStore(table, clock, generate_text)


@pytest.fixture
def orchestrator(table, sender, clock):
    return SendOrchestrator(table, sender, clock)


@pytest.fixture
def save_use_case(draft_store, orchestrator):
    return SaveEmailUseCase(draft_store, orchestrator, id_factory=lambda: "draft-generated")


@pytest.fixture
def content():
    """Fully populated envelope and body."""
    return EmailContent(
        subject="subject",
        from_=["example@example.com"],
        to=["to@example.com", "second@example.com"],
        cc=["cc@example.com"],
        bcc=["bcc@example.com"],
        reply_to=["reply@example.com"],
        text="text",
        html="<p>html</p>",
    )
