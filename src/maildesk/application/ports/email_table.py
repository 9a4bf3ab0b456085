"""Persistence port for the single-table email store.

Items are DynamoDB typed attribute maps (``{"MessageID": {"S": "..."}}``).
Every mutation carries a :class:`Condition`; there are no unconditioned
overwrites.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Sequence, Union

Item = dict[str, dict[str, Any]]

KEY_ATTRIBUTE = "MessageID"


class ConditionCheckFailed(Exception):
    """The stored item did not satisfy the write condition."""


@dataclass(frozen=True)
class Condition:
    """Predicate over the currently stored item.

    ``must_not_exist`` requires that no item is stored under the key.
    Otherwise the item must exist, every attribute in ``equals`` must hold
    exactly that typed value, and every attribute in ``begins_with`` must be
    a string with that prefix. Attributes named in ``must_not_have`` must be
    absent from the item.
    """

    must_not_exist: bool = False
    equals: Mapping[str, dict[str, Any]] = field(default_factory=dict)
    begins_with: Mapping[str, str] = field(default_factory=dict)
    must_not_have: frozenset[str] = frozenset()

    def matches(self, item: Optional[Item]) -> bool:
        if self.must_not_exist:
            return item is None
        if item is None:
            return False
        for name, value in self.equals.items():
            if item.get(name) != value:
                return False
        for name, prefix in self.begins_with.items():
            stored = item.get(name) or {}
            if not stored.get("S", "").startswith(prefix):
                return False
        if any(name in item for name in self.must_not_have):
            return False
        return True


@dataclass(frozen=True)
class DeleteOp:
    message_id: str
    condition: Condition


@dataclass(frozen=True)
class PutOp:
    item: Item
    condition: Condition


WriteOp = Union[DeleteOp, PutOp]


class EmailTable(Protocol):
    def get(self, message_id: str) -> Optional[Item]: ...
    def put(self, item: Item, condition: Condition) -> None: ...
    def delete(self, message_id: str, condition: Condition) -> None: ...
    def transact_write(self, ops: Sequence[WriteOp]) -> None: ...
