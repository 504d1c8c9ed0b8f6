"""
Typed view of realtime change-feed payloads.

Raw payloads are dictionaries shaped like ``ChangeEvent.to_payload()``. They
are validated here, at the boundary, and turned into one of the event classes
below before any client component looks at them. Table and event-type
combinations that no component understands are rejected.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, validate

from thriftmarket.models.notification import TYPES as NOTIFICATION_TYPES
from thriftmarket.models.order import STATUSES


@dataclass(frozen=True)
class NotificationRecord:
    id: str
    user_id: str
    type: str
    title: str
    message: str
    link: Optional[str]
    is_read: bool
    created_at: datetime


@dataclass(frozen=True)
class MessageRecord:
    id: str
    order_id: str
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool
    created_at: datetime


@dataclass(frozen=True)
class OrderRecord:
    id: str
    buyer_id: str
    seller_id: str
    product_id: str
    status: str
    total_amount: float
    delivery_date: Optional[date]
    created_at: datetime


@dataclass(frozen=True)
class NotificationInserted:
    record: NotificationRecord


@dataclass(frozen=True)
class NotificationUpdated:
    record: NotificationRecord


@dataclass(frozen=True)
class MessageInserted:
    record: MessageRecord


@dataclass(frozen=True)
class MessageUpdated:
    record: MessageRecord


@dataclass(frozen=True)
class OrderChanged:
    event_type: str
    record: OrderRecord


@dataclass(frozen=True)
class RowDeleted:
    table: str
    id: str


class NotificationRecordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    type = fields.Str(required=True, validate=validate.OneOf(NOTIFICATION_TYPES))
    title = fields.Str(required=True)
    message = fields.Str(required=True)
    link = fields.Str(load_default=None, allow_none=True)
    is_read = fields.Bool(load_default=False)
    created_at = fields.DateTime(required=True)

    @post_load
    def make_record(self, data, **kwargs):
        return NotificationRecord(**data)


class MessageRecordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.Str(required=True)
    order_id = fields.Str(required=True)
    sender_id = fields.Str(required=True)
    receiver_id = fields.Str(required=True)
    content = fields.Str(required=True, validate=validate.Length(min=1))
    is_read = fields.Bool(load_default=False)
    created_at = fields.DateTime(required=True)

    @post_load
    def make_record(self, data, **kwargs):
        return MessageRecord(**data)


class OrderRecordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.Str(required=True)
    buyer_id = fields.Str(required=True)
    seller_id = fields.Str(required=True)
    product_id = fields.Str(required=True)
    status = fields.Str(required=True, validate=validate.OneOf(STATUSES))
    total_amount = fields.Float(required=True)
    delivery_date = fields.Date(load_default=None, allow_none=True)
    created_at = fields.DateTime(required=True)

    @post_load
    def make_record(self, data, **kwargs):
        return OrderRecord(**data)


class ChangePayloadSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    table = fields.Str(required=True)
    eventType = fields.Str(required=True, validate=validate.OneOf(("INSERT", "UPDATE", "DELETE")))
    new = fields.Dict(load_default=dict)
    old = fields.Dict(load_default=dict)


_notification = NotificationRecordSchema()
_message = MessageRecordSchema()
_order = OrderRecordSchema()
_envelope = ChangePayloadSchema()

_LOADERS = {
    ("notifications", "INSERT"): lambda p: NotificationInserted(_notification.load(p["new"])),
    ("notifications", "UPDATE"): lambda p: NotificationUpdated(_notification.load(p["new"])),
    ("messages", "INSERT"): lambda p: MessageInserted(_message.load(p["new"])),
    ("messages", "UPDATE"): lambda p: MessageUpdated(_message.load(p["new"])),
    ("orders", "INSERT"): lambda p: OrderChanged("INSERT", _order.load(p["new"])),
    ("orders", "UPDATE"): lambda p: OrderChanged("UPDATE", _order.load(p["new"])),
}


def load_event(payload):
    """Validate a raw change payload and return its typed event."""
    envelope = _envelope.load(payload)
    table, event_type = envelope["table"], envelope["eventType"]

    if event_type == "DELETE":
        row_id = envelope["old"].get("id")
        if not row_id:
            raise ValidationError({"old": ["DELETE payload without a row id"]})
        return RowDeleted(table, row_id)

    loader = _LOADERS.get((table, event_type))
    if loader is None:
        raise ValidationError({"table": [f"Unsupported change {table} {event_type}"]})
    return loader(envelope)
