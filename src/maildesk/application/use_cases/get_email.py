"""Read a stored email by id."""

from __future__ import annotations

from maildesk.application.ports.email_table import EmailTable
from maildesk.domain.entities.email_record import EmailRecord
from maildesk.domain.errors import InvalidInput, RecordNotFound
from maildesk.infrastructure.dynamodb import codec


class GetEmailUseCase:
    def __init__(self, table: EmailTable) -> None:
        self.table = table

    def get(self, message_id: str) -> EmailRecord:
        if not message_id:
            raise InvalidInput("message id is required", details={"field": "message_id"})

        item = self.table.get(message_id)
        if item is None:
            raise RecordNotFound(f"email {message_id} not found", details={"message_id": message_id})
        return codec.from_item(item)
