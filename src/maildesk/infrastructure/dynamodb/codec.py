"""Mapping between :class:`EmailRecord` and DynamoDB items.

Layout of one email item::

    MessageID       S   primary key
    TypeYearMonth   S   "<type>#YYYY-MM", type is draft | sent | inbox
    DateTime        S   "DD-HH:MM:SS" of the last write
    TimeUpdated     S   ISO-8601 UTC of the last write
    Subject         S
    From, To, Cc,   L   ordered address lists (SS is accepted on read,
    Bcc, ReplyTo        the ingestion pipeline writes string sets)
    Text, HTML      S
    Version         N   optimistic concurrency counter

Any other attribute is carried through untouched in ``EmailRecord.extra``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from maildesk.application.ports.email_table import KEY_ATTRIBUTE, Item
from maildesk.domain.entities.email_record import EmailContent, EmailKind, EmailRecord
from maildesk.domain.entities.save import TIME_FORMAT, format_time
from maildesk.domain.errors import StorageError

TYPE_ATTRIBUTE = "TypeYearMonth"
VERSION_ATTRIBUTE = "Version"

_TYPE_PREFIXES = {
    EmailKind.DRAFT: "draft",
    EmailKind.SENT: "sent",
    EmailKind.RECEIVED: "inbox",
}
_KINDS_BY_PREFIX = {prefix: kind for kind, prefix in _TYPE_PREFIXES.items()}

_ADDRESS_ATTRIBUTES = {
    "From": "from_",
    "To": "to",
    "Cc": "cc",
    "Bcc": "bcc",
    "ReplyTo": "reply_to",
}
_STRING_ATTRIBUTES = {
    "Subject": "subject",
    "Text": "text",
    "HTML": "html",
}
_OWNED_ATTRIBUTES = frozenset(
    {KEY_ATTRIBUTE, TYPE_ATTRIBUTE, "DateTime", "TimeUpdated", VERSION_ATTRIBUTE}
    | set(_ADDRESS_ATTRIBUTES)
    | set(_STRING_ATTRIBUTES)
)

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def serialize(value: Any) -> dict[str, Any]:
    return _serializer.serialize(value)


def key(message_id: str) -> Item:
    return {KEY_ATTRIBUTE: serialize(message_id)}


def type_prefix(kind: EmailKind) -> str:
    """Prefix of ``TypeYearMonth`` shared by every item of ``kind``."""
    return f"{_TYPE_PREFIXES[kind]}#"


def type_year_month(kind: EmailKind, when: datetime) -> str:
    return f"{type_prefix(kind)}{when.strftime('%Y-%m')}"


def kind_from_type(value: str) -> EmailKind:
    prefix, sep, _ = value.partition("#")
    kind = _KINDS_BY_PREFIX.get(prefix)
    if not sep or kind is None:
        raise StorageError(f"unrecognized email type: {value!r}", details={TYPE_ATTRIBUTE: value})
    return kind


def to_item(record: EmailRecord) -> Item:
    """Encode ``record`` as a DynamoDB item."""
    when = record.updated_at.astimezone(timezone.utc)
    item: Item = dict(record.extra)
    item[KEY_ATTRIBUTE] = serialize(record.message_id)
    item[TYPE_ATTRIBUTE] = serialize(type_year_month(record.kind, when))
    item["DateTime"] = serialize(when.strftime("%d-%H:%M:%S"))
    item["TimeUpdated"] = serialize(format_time(when))
    item[VERSION_ATTRIBUTE] = serialize(record.version)

    for attr, name in _STRING_ATTRIBUTES.items():
        item[attr] = serialize(getattr(record.content, name))
    for attr, name in _ADDRESS_ATTRIBUTES.items():
        item[attr] = serialize(list(getattr(record.content, name)))
    return item


def from_item(item: Mapping[str, dict[str, Any]]) -> EmailRecord:
    """Decode a DynamoDB item; missing optional attributes decode as empty."""
    if KEY_ATTRIBUTE not in item or TYPE_ATTRIBUTE not in item:
        raise StorageError("item is missing its key or type attribute", details={"attributes": sorted(item)})

    try:
        values = {name: _deserializer.deserialize(value) for name, value in item.items() if name in _OWNED_ATTRIBUTES}
    except (TypeError, ValueError) as e:
        raise StorageError(f"cannot decode item: {e}", cause=e) from e

    content = EmailContent(
        **{name: str(values.get(attr, "")) for attr, name in _STRING_ATTRIBUTES.items()},
        **{name: _addresses(values.get(attr)) for attr, name in _ADDRESS_ATTRIBUTES.items()},
    )
    return EmailRecord(
        message_id=str(values[KEY_ATTRIBUTE]),
        kind=kind_from_type(str(values[TYPE_ATTRIBUTE])),
        updated_at=_parse_time(values.get("TimeUpdated")),
        content=content,
        version=int(values.get(VERSION_ATTRIBUTE, 0)),
        extra={name: value for name, value in item.items() if name not in _OWNED_ATTRIBUTES},
    )


def _addresses(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, set):
        # string sets carry no order
        return sorted(value)
    return [str(v) for v in value]


def _parse_time(value: Any) -> datetime:
    if not value:
        return datetime.fromtimestamp(0, timezone.utc)
    try:
        return datetime.strptime(str(value), TIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise StorageError(f"cannot parse TimeUpdated {value!r}", cause=e) from e
