"""Wire use cases to their adapters from settings."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from loguru import logger

from maildesk.application.drafts import DraftStore, SendOrchestrator
from maildesk.application.ports.clock import Clock, utc_now
from maildesk.application.ports.text_generator import TextGenerator
from maildesk.application.ports.email_sender import EmailSender
from maildesk.application.ports.email_table import EmailTable
from maildesk.application.use_cases import DiscardDraftUseCase, GetEmailUseCase, SaveEmailUseCase
from maildesk.infrastructure.dynamodb.table import dynamodb_table_from_settings
from maildesk.infrastructure.html_text import generate_text
from maildesk.infrastructure.memory import InMemoryEmailTable
from maildesk.infrastructure.ses import ses_sender_from_settings
from maildesk.infrastructure.settings import Settings, get_settings


@dataclass(frozen=True)
class UseCases:
    save: SaveEmailUseCase
    get: GetEmailUseCase
    discard: DiscardDraftUseCase


def build_use_cases(
    table: EmailTable,
    sender: EmailSender,
    clock: Clock = utc_now,
    text_generator: TextGenerator = generate_text,
) -> UseCases:
    drafts = DraftStore(table, clock, text_generator)
    orchestrator = SendOrchestrator(table, sender, clock)
    return UseCases(
        save=SaveEmailUseCase(drafts, orchestrator),
        get=GetEmailUseCase(table),
        discard=DiscardDraftUseCase(table),
    )


def build_table(settings: Settings) -> EmailTable:
    if settings.table_backend == "memory":
        logger.warning("Using in-memory email table; records are lost on restart")
        return InMemoryEmailTable()
    logger.info(f"Using DynamoDB table {settings.dynamodb_table_name} in {settings.aws_region}")
    return dynamodb_table_from_settings(settings)


@lru_cache
def get_use_cases() -> UseCases:
    """Get cached use cases built from the process settings."""
    settings = get_settings()
    return build_use_cases(build_table(settings), ses_sender_from_settings(settings))
