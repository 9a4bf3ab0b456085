"""DynamoDB implementation of the EmailTable port."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from maildesk.application.ports.email_table import (
    KEY_ATTRIBUTE,
    Condition,
    ConditionCheckFailed,
    DeleteOp,
    EmailTable,
    Item,
    PutOp,
    WriteOp,
)
from maildesk.domain.errors import DeadlineExceeded, StorageError
from maildesk.infrastructure.aws import TIMEOUT_ERRORS, aws_client
from maildesk.infrastructure.dynamodb import codec
from maildesk.infrastructure.settings import Settings, get_settings


def render_condition(condition: Condition) -> dict[str, Any]:
    """Render ``condition`` as ConditionExpression request parameters."""
    if condition.must_not_exist:
        return {
            "ConditionExpression": "attribute_not_exists(#k)",
            "ExpressionAttributeNames": {"#k": KEY_ATTRIBUTE},
        }

    clauses: list[str] = []
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    for i, (name, value) in enumerate(condition.equals.items()):
        names[f"#e{i}"] = name
        values[f":e{i}"] = value
        clauses.append(f"#e{i} = :e{i}")
    for i, (name, prefix) in enumerate(condition.begins_with.items()):
        names[f"#b{i}"] = name
        values[f":b{i}"] = codec.serialize(prefix)
        clauses.append(f"begins_with(#b{i}, :b{i})")
    for i, name in enumerate(sorted(condition.must_not_have)):
        names[f"#n{i}"] = name
        clauses.append(f"attribute_not_exists(#n{i})")

    if not clauses:
        # plain existence check
        names["#k"] = KEY_ATTRIBUTE
        clauses.append("attribute_exists(#k)")

    params: dict[str, Any] = {
        "ConditionExpression": " AND ".join(clauses),
        "ExpressionAttributeNames": names,
    }
    if values:
        params["ExpressionAttributeValues"] = values
    return params


class DynamoEmailTable(EmailTable):
    """Email items in a single DynamoDB table keyed by ``MessageID``."""

    def __init__(self, client: Any, table_name: str) -> None:
        self.client = client
        self.table_name = table_name

    def get(self, message_id: str) -> Optional[Item]:
        try:
            resp = self.client.get_item(
                TableName=self.table_name,
                Key=codec.key(message_id),
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as e:
            raise self._translate("get_item", e) from e
        # an empty map means no item, same as a missing one
        return resp.get("Item") or None

    def put(self, item: Item, condition: Condition) -> None:
        try:
            self.client.put_item(
                TableName=self.table_name,
                Item=item,
                **render_condition(condition),
            )
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                raise ConditionCheckFailed(str(e)) from e
            raise self._translate("put_item", e) from e
        except BotoCoreError as e:
            raise self._translate("put_item", e) from e

    def delete(self, message_id: str, condition: Condition) -> None:
        try:
            self.client.delete_item(
                TableName=self.table_name,
                Key=codec.key(message_id),
                **render_condition(condition),
            )
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                raise ConditionCheckFailed(str(e)) from e
            raise self._translate("delete_item", e) from e
        except BotoCoreError as e:
            raise self._translate("delete_item", e) from e

    def transact_write(self, ops: Sequence[WriteOp]) -> None:
        items = [self._transact_item(op) for op in ops]
        try:
            self.client.transact_write_items(TransactItems=items)
        except ClientError as e:
            if _error_code(e) == "TransactionCanceledException" and _condition_cancelled(e):
                raise ConditionCheckFailed(str(e)) from e
            raise self._translate("transact_write_items", e) from e
        except BotoCoreError as e:
            raise self._translate("transact_write_items", e) from e

    def _transact_item(self, op: WriteOp) -> dict[str, Any]:
        if isinstance(op, DeleteOp):
            return {
                "Delete": {
                    "TableName": self.table_name,
                    "Key": codec.key(op.message_id),
                    **render_condition(op.condition),
                }
            }
        if isinstance(op, PutOp):
            return {
                "Put": {
                    "TableName": self.table_name,
                    "Item": op.item,
                    **render_condition(op.condition),
                }
            }
        raise TypeError(f"unsupported write op: {op!r}")

    def _translate(self, operation: str, error: Exception) -> Exception:
        if isinstance(error, TIMEOUT_ERRORS):
            logger.error(f"DynamoDB {operation} on {self.table_name} timed out: {error}")
            return DeadlineExceeded(f"{operation} timed out", details={"table": self.table_name})
        logger.error(f"DynamoDB {operation} on {self.table_name} failed: {error}")
        return StorageError(
            f"{operation} failed: {error}",
            details={"table": self.table_name, "code": _error_code(error)},
            cause=error,
        )


def _error_code(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return ""


def _condition_cancelled(error: ClientError) -> bool:
    reasons = error.response.get("CancellationReasons") or []
    return any(reason.get("Code") == "ConditionalCheckFailed" for reason in reasons)


def dynamodb_table_from_settings(settings: Settings | None = None) -> DynamoEmailTable:
    settings = settings or get_settings()
    return DynamoEmailTable(aws_client("dynamodb", settings), settings.dynamodb_table_name)
