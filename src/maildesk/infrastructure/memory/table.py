"""In-process EmailTable for local runs and tests."""

from __future__ import annotations

import copy
import threading
from typing import Optional, Sequence

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


class InMemoryEmailTable(EmailTable):
    """Dict-backed table with the same conditional semantics as DynamoDB.

    A single lock makes every write, and every transaction as a whole,
    atomic with respect to its condition checks.
    """

    def __init__(self) -> None:
        self._items: dict[str, Item] = {}
        self._lock = threading.Lock()

    def get(self, message_id: str) -> Optional[Item]:
        with self._lock:
            item = self._items.get(message_id)
            return copy.deepcopy(item) if item is not None else None

    def put(self, item: Item, condition: Condition) -> None:
        message_id = _message_id(item)
        with self._lock:
            self._check(message_id, condition)
            self._items[message_id] = copy.deepcopy(item)

    def delete(self, message_id: str, condition: Condition) -> None:
        with self._lock:
            self._check(message_id, condition)
            self._items.pop(message_id, None)

    def transact_write(self, ops: Sequence[WriteOp]) -> None:
        with self._lock:
            keys = [op.message_id if isinstance(op, DeleteOp) else _message_id(op.item) for op in ops]
            if len(set(keys)) != len(keys):
                raise ValueError("a transaction cannot touch the same item twice")
            for key, op in zip(keys, ops):
                self._check(key, op.condition)
            for key, op in zip(keys, ops):
                if isinstance(op, PutOp):
                    self._items[key] = copy.deepcopy(op.item)
                else:
                    self._items.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _check(self, message_id: str, condition: Condition) -> None:
        if not condition.matches(self._items.get(message_id)):
            logger.debug(f"Condition failed for {message_id}")
            raise ConditionCheckFailed(f"condition failed for {message_id}")


def _message_id(item: Item) -> str:
    return item[KEY_ATTRIBUTE]["S"]
