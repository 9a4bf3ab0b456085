"""Draft persistence and the draft-to-sent transition."""

from maildesk.application.drafts.sender import SendOrchestrator
from maildesk.application.drafts.store import DraftStore, unchanged_since_read

__all__ = [
    "DraftStore",
    "SendOrchestrator",
    "unchanged_since_read",
]
