"""
Client side of the per-order chat.

Sending is optimistic. ``stage`` puts a provisional message into the thread
straight away and ``commit`` writes it to the store, swapping the provisional
entry for the stored row on success or taking it back out (and restoring the
draft) on failure. The realtime echo of our own insert is dropped by id.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional

from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy.exc import SQLAlchemyError

from thriftmarket.extensions import change_feed, db
from thriftmarket.schemas.realtime_schema import (
    MessageInserted,
    MessageRecord,
    MessageUpdated,
    RowDeleted,
    load_event,
)
from thriftmarket.services import chat_service
from thriftmarket.services.order_service import get_order
from thriftmarket.utils.exceptions import ServiceError, ValidationError
from thriftmarket.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

PENDING = "pending"
CONFIRMED = "confirmed"
FAILED = "failed"

TEMP_PREFIX = "temp-"


def record_from_row(row):
    return MessageRecord(
        id=row.id,
        order_id=row.order_id,
        sender_id=row.sender_id,
        receiver_id=row.receiver_id,
        content=row.content,
        is_read=bool(row.is_read),
        created_at=row.created_at,
    )


@dataclass
class PendingSend:
    temp_id: str
    content: str
    status: str = PENDING
    message: Optional[MessageRecord] = None
    error: Optional[Exception] = field(default=None, repr=False)

    @property
    def is_pending(self):
        return self.status == PENDING


class ChatChannel:
    def __init__(self, user, order_id, other_user_id=None):
        self.user = user
        self.order_id = order_id
        self.other_user_id = other_user_id
        self.draft = ""
        self._thread = []
        self._subscription = None

    @property
    def messages(self):
        """The thread, oldest first. Provisional entries included."""
        return sorted(self._thread, key=lambda m: m.created_at)

    @property
    def is_open(self):
        return self._subscription is not None and not self._subscription.closed

    def _index_of(self, message_id):
        for i, m in enumerate(self._thread):
            if m.id == message_id:
                return i
        return None

    def open(self):
        rows = chat_service.list_messages(self.order_id, self.user)
        self._thread = [record_from_row(r) for r in rows]
        if self.other_user_id is None:
            order = get_order(self.order_id)
            self.other_user_id = chat_service.counterpart_id(order, self.user.id)
        if not self.is_open:
            self._subscription = change_feed.subscribe("messages", order_id=self.order_id)
        chat_service.mark_thread_read(self.order_id, self.user)
        return self.messages

    def close(self):
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    # -------- sending --------

    def stage(self, content):
        content = (content or "").strip()
        if not content:
            raise ValidationError("content is required", {"field": "content"})
        pending = PendingSend(temp_id=f"{TEMP_PREFIX}{uuid.uuid4().hex[:12]}", content=content)
        self._thread.append(
            MessageRecord(
                id=pending.temp_id,
                order_id=self.order_id,
                sender_id=self.user.id,
                receiver_id=self.other_user_id or "",
                content=content,
                is_read=False,
                created_at=utcnow(),
            )
        )
        self.draft = ""
        return pending

    def commit(self, pending):
        if not pending.is_pending:
            return pending
        try:
            row = chat_service.send_message(self.order_id, self.user, pending.content)
        except (ServiceError, SQLAlchemyError) as err:
            db.session.rollback()
            idx = self._index_of(pending.temp_id)
            if idx is not None:
                del self._thread[idx]
            self.draft = pending.content
            pending.status = FAILED
            pending.error = err
            logger.warning("Message send failed on %s: %s", self.order_id, err)
            raise

        stored = record_from_row(row)
        idx = self._index_of(pending.temp_id)
        if self._index_of(stored.id) is not None:
            # echo got here first
            if idx is not None:
                del self._thread[idx]
        elif idx is not None:
            self._thread[idx] = stored
        else:
            self._thread.append(stored)
        pending.status = CONFIRMED
        pending.message = stored
        return pending

    def send(self, content):
        return self.commit(self.stage(content))

    # -------- realtime --------

    def pump(self):
        if not self.is_open:
            return 0
        applied = 0
        for change in self._subscription.drain():
            if self.apply(change.to_payload()):
                applied += 1
        return applied

    def apply(self, payload):
        try:
            event = load_event(payload)
        except SchemaValidationError as err:
            logger.warning("Ignoring malformed message event: %s", err.messages)
            return False

        if isinstance(event, MessageInserted):
            record = event.record
            if record.order_id != self.order_id or self._index_of(record.id) is not None:
                return False
            self._thread.append(record)
            if record.sender_id != self.user.id:
                chat_service.mark_thread_read(self.order_id, self.user)
            return True

        if isinstance(event, MessageUpdated):
            idx = self._index_of(event.record.id)
            if idx is None:
                return False
            self._thread[idx] = event.record
            return True

        if isinstance(event, RowDeleted) and event.table == "messages":
            idx = self._index_of(event.id)
            if idx is None:
                return False
            del self._thread[idx]
            return True

        return False
