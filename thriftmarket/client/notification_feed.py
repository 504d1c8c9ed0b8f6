"""
Client side of the notification dispatcher.

A ``NotificationFeed`` keeps one user's inbox in memory and reconciles two
delivery paths: pushes from the realtime change feed and a periodic full
re-fetch. Both are idempotent merges keyed by notification id. Whenever they
disagree the re-fetch wins and the unread count is recomputed from scratch.
"""
import logging
from dataclasses import replace

from flask import current_app
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from thriftmarket.extensions import change_feed, db
from thriftmarket.schemas.realtime_schema import (
    NotificationInserted,
    NotificationRecord,
    NotificationUpdated,
    load_event,
)
from thriftmarket.services import notification_service
from thriftmarket.utils.exceptions import ServiceError

logger = logging.getLogger(__name__)


def record_from_row(row):
    return NotificationRecord(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        title=row.title,
        message=row.message,
        link=row.link,
        is_read=bool(row.is_read),
        created_at=row.created_at,
    )


class NotificationFeed:
    def __init__(self, user, limit=None, poll_interval=None):
        self.user = user
        self.user_id = user.id
        self.limit = limit or current_app.config.get("NOTIFICATION_FEED_LIMIT", 20)
        self.poll_interval = poll_interval or current_app.config.get("NOTIFICATION_POLL_SECONDS", 10)
        self.unread_count = 0
        self.last_polled_at = None
        self._items = {}
        self._subscription = None

    @property
    def notifications(self):
        """Newest first."""
        return sorted(
            self._items.values(),
            key=lambda n: (n.created_at, n.id),
            reverse=True,
        )[: self.limit]

    @property
    def is_subscribed(self):
        return self._subscription is not None and not self._subscription.closed

    def subscribe(self):
        if not self.is_subscribed:
            self._subscription = change_feed.subscribe("notifications", user_id=self.user_id)
        return self._subscription

    def unsubscribe(self):
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    # -------- polling --------

    def poll(self, now=None):
        """Authoritative re-fetch; replaces local state."""
        rows = notification_service.list_notifications(self.user_id, self.limit)
        self._items = {row.id: record_from_row(row) for row in rows}
        # counted in the store, not just on the visible page
        self.unread_count = notification_service.unread_count(self.user_id)
        self.last_polled_at = now
        return self.notifications

    def tick(self, now):
        """Poll when the interval has elapsed. ``now`` is seconds on any monotonic clock."""
        if self.last_polled_at is None or now - self.last_polled_at >= self.poll_interval:
            self.poll(now)
            return True
        return False

    # -------- realtime --------

    def pump(self):
        if not self.is_subscribed:
            return 0
        applied = 0
        stale = False
        for change in self._subscription.drain():
            payload = change.to_payload()
            if self.apply(payload, resync=False):
                applied += 1
                stale = stale or payload["eventType"] == "UPDATE"
        if stale:
            # one re-fetch covers a whole batch of read-flag changes
            self.poll(self.last_polled_at)
        return applied

    def apply(self, payload, resync=True):
        try:
            event = load_event(payload)
        except ValidationError as err:
            logger.warning("Ignoring malformed notification event: %s", err.messages)
            return False

        if isinstance(event, NotificationInserted):
            record = event.record
            if record.user_id != self.user_id or record.id in self._items:
                return False
            self._items[record.id] = record
            if not record.is_read:
                self.unread_count += 1
            return True

        if isinstance(event, NotificationUpdated):
            # read flags changed elsewhere; trust the store, not the payload
            if resync:
                self.poll(self.last_polled_at)
            return True

        return False

    # -------- read state --------

    def mark_read(self, notification_id):
        record = self._items.get(notification_id)
        if record is not None and not record.is_read:
            self._items[notification_id] = _with_read(record)
            self.unread_count = max(0, self.unread_count - 1)
        try:
            notification_service.mark_notification_read(notification_id, self.user)
        except (ServiceError, SQLAlchemyError):
            db.session.rollback()
            logger.exception("Failed to mark notification %s read", notification_id)

    def mark_all_read(self):
        self._items = {k: _with_read(v) for k, v in self._items.items()}
        self.unread_count = 0
        try:
            notification_service.mark_all_read_for_user(self.user_id)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to mark all notifications read for %s", self.user_id)


def _with_read(record):
    return record if record.is_read else replace(record, is_read=True)
