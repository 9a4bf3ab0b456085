"""Use cases exposed to callers."""

from maildesk.application.use_cases.discard_draft import DiscardDraftUseCase
from maildesk.application.use_cases.get_email import GetEmailUseCase
from maildesk.application.use_cases.save_email import SaveEmailUseCase, new_draft_id

__all__ = [
    "SaveEmailUseCase",
    "GetEmailUseCase",
    "DiscardDraftUseCase",
    "new_draft_id",
]
