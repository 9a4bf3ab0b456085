"""Save a draft, optionally sending it."""

from __future__ import annotations

from typing import Callable
from uuid import uuid4

from loguru import logger

from maildesk.application.drafts.sender import SendOrchestrator
from maildesk.application.drafts.store import DraftStore
from maildesk.application.text import TextPolicy
from maildesk.domain.entities.save import CreateInput, SaveInput, SaveResult
from maildesk.domain.errors import InvalidInput


def new_draft_id() -> str:
    return f"draft-{uuid4().hex}"


class SaveEmailUseCase:
    """Entry point for draft writes.

    Flow:
    1. Validate the input (id present, known text policy)
    2. Save the draft, deriving ``text`` per policy
    3. If ``send`` is set, dispatch it and swap the draft for a sent record

    Any failure is raised to the caller unchanged. A failed draft save never
    reaches the send step.
    """

    def __init__(
        self,
        drafts: DraftStore,
        orchestrator: SendOrchestrator,
        id_factory: Callable[[], str] = new_draft_id,
    ) -> None:
        self.drafts = drafts
        self.orchestrator = orchestrator
        self.id_factory = id_factory

    def save(self, data: SaveInput) -> SaveResult:
        if not data.message_id:
            raise InvalidInput("message id is required", details={"field": "message_id"})
        policy = TextPolicy.parse(data.generate_text)

        draft = self.drafts.save_draft(data.message_id, data.content, policy)
        if not data.send:
            return SaveResult.from_record(draft)

        logger.info(f"Sending draft {draft.message_id}")
        sent = self.orchestrator.send_and_replace(draft)
        return SaveResult.from_record(sent)

    def create(self, data: CreateInput) -> SaveResult:
        """Save a new draft under a generated id."""
        message_id = self.id_factory()
        logger.info(f"Creating draft {message_id}")
        return self.save(
            SaveInput(
                message_id=message_id,
                content=data.content,
                generate_text=data.generate_text,
                send=data.send,
            )
        )
