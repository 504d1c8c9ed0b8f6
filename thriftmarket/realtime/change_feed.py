"""
In-process change feed for the realtime channels.

Row changes of models flagged with ``__realtime__ = True`` are captured from
the SQLAlchemy session while it flushes and published to subscribers only once
the surrounding transaction commits. A rollback discards them. Subscribers
filter by table name and column equality, the same way a client subscribes to
``notifications`` where ``user_id`` equals its own id.

Delivery is best effort: every subscription owns a bounded queue and events
that do not fit are dropped with a warning. Consumers that need completeness
re-fetch from the store (see the notification feed's polling).
"""
import logging
import queue
import threading
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from thriftmarket.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"

PENDING_KEY = "realtime_pending"


def _jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def row_payload(obj):
    mapper = inspect(obj).mapper
    return {attr.key: _jsonable(getattr(obj, attr.key)) for attr in mapper.column_attrs}


def is_tracked(obj):
    return bool(getattr(type(obj), "__realtime__", False))


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    type: str
    new: dict = field(default_factory=dict)
    old: dict = field(default_factory=dict)
    commit_timestamp: Optional[str] = None

    @property
    def row(self):
        return self.old if self.type == DELETE else self.new

    def to_payload(self):
        return {
            "table": self.table,
            "eventType": self.type,
            "new": dict(self.new),
            "old": dict(self.old),
            "commit_timestamp": self.commit_timestamp,
        }


class Subscription:
    def __init__(self, feed, table, filters, maxsize):
        self.id = f"sub-{uuid.uuid4().hex[:8]}"
        self.table = table
        self.filters = dict(filters)
        self.closed = False
        self._feed = feed
        self._queue = queue.Queue(maxsize=maxsize)

    def matches(self, change):
        if change.table != self.table:
            return False
        row = change.row
        return all(row.get(k) == v for k, v in self.filters.items())

    def put(self, change):
        if self.closed:
            return False
        try:
            self._queue.put_nowait(change)
        except queue.Full:
            logger.warning(
                "Realtime queue full, dropping %s on %s for %s",
                change.type, change.table, self.id,
            )
            return False
        return True

    def get(self, timeout=None):
        """Blocking read used by streaming consumers; None on timeout."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self):
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def close(self):
        if not self.closed:
            self.closed = True
            self._feed.unsubscribe(self)


class ChangeFeed:
    def __init__(self, app=None):
        self.queue_size = 500
        self._subscriptions = {}
        self._lock = threading.Lock()
        self._listening = False
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.queue_size = app.config.get("REALTIME_QUEUE_SIZE", self.queue_size)
        app.extensions["change_feed"] = self
        if not self._listening:
            event.listen(Session, "after_flush", self._after_flush)
            event.listen(Session, "after_commit", self._after_commit)
            event.listen(Session, "after_rollback", self._after_rollback)
            self._listening = True

    # subscriptions

    def subscribe(self, table, **filters):
        sub = Subscription(self, table, filters, self.queue_size)
        with self._lock:
            self._subscriptions[sub.id] = sub
        logger.debug("Subscribed %s to %s %s", sub.id, table, filters)
        return sub

    def unsubscribe(self, sub):
        with self._lock:
            self._subscriptions.pop(sub.id, None)
        sub.closed = True
        logger.debug("Unsubscribed %s", sub.id)

    def close_all(self):
        with self._lock:
            subs = list(self._subscriptions.values())
        for sub in subs:
            sub.close()

    def subscriber_count(self):
        with self._lock:
            return len(self._subscriptions)

    def publish(self, change):
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(change)]
        for sub in targets:
            sub.put(change)
        return len(targets)

    # capture

    def stage(self, session, change_type, obj):
        """Queue a change made outside the unit of work, e.g. a core UPDATE."""
        if not is_tracked(obj):
            return
        payload = row_payload(obj)
        old = {"id": payload.get("id")} if change_type == UPDATE else {}
        session.info.setdefault(PENDING_KEY, []).append(
            ChangeEvent(obj.__tablename__, change_type, payload, old)
        )

    def _after_flush(self, session, flush_context):
        pending = session.info.setdefault(PENDING_KEY, [])
        for obj in session.new:
            if is_tracked(obj):
                pending.append(ChangeEvent(obj.__tablename__, INSERT, row_payload(obj)))
        for obj in session.dirty:
            if is_tracked(obj) and session.is_modified(obj, include_collections=False):
                payload = row_payload(obj)
                pending.append(
                    ChangeEvent(obj.__tablename__, UPDATE, payload, {"id": payload.get("id")})
                )
        for obj in session.deleted:
            if is_tracked(obj):
                pending.append(ChangeEvent(obj.__tablename__, DELETE, {}, row_payload(obj)))

    def _after_commit(self, session):
        pending = session.info.pop(PENDING_KEY, [])
        if not pending:
            return
        stamp = utcnow().isoformat()
        for change in pending:
            self.publish(
                ChangeEvent(change.table, change.type, change.new, change.old, stamp)
            )

    def _after_rollback(self, session):
        dropped = session.info.pop(PENDING_KEY, [])
        if dropped:
            logger.debug("Discarded %d realtime changes on rollback", len(dropped))
