import logging
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from thriftmarket.extensions import db
from thriftmarket.models.notification import Notification, TYPES
from thriftmarket.utils.exceptions import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


def preview(text, size=50):
    text = text or ""
    return f"{text[:size]}..." if len(text) > size else text


def build_notification(user_id, notif_type, title, message, link=None):
    if notif_type not in TYPES:
        raise ValueError(f"Unknown notification type: {notif_type}")
    return Notification(
        user_id=user_id,
        type=notif_type,
        title=title,
        message=message,
        link=link,
    )


def send_notifications(notifications):
    """
    Insert notifications in their own transaction.

    Delivery is best effort: the domain change that triggered them is already
    committed, so a failure here is logged and rolled back without raising.
    """
    if not notifications:
        return []
    try:
        db.session.add_all(notifications)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(
            "Failed to deliver %d notification(s) to %s",
            len(notifications),
            sorted({n.user_id for n in notifications}),
        )
        return []
    return notifications


def notify(user_id, notif_type, title, message, link=None):
    sent = send_notifications([build_notification(user_id, notif_type, title, message, link)])
    return sent[0] if sent else None


def get_user_notifications(user_id, is_read=None):
    q = Notification.query.filter_by(user_id=user_id)
    if is_read is not None:
        q = q.filter_by(is_read=is_read)
    return q.order_by(Notification.created_at.desc(), Notification.id.desc())


def list_notifications(user_id, limit=None):
    limit = limit or current_app.config.get("NOTIFICATION_FEED_LIMIT", 20)
    return get_user_notifications(user_id).limit(limit).all()


def unread_count(user_id):
    return Notification.query.filter_by(user_id=user_id, is_read=False).count()


def mark_notification_read(notification_id, user):
    notification = db.session.get(Notification, notification_id)
    if not notification:
        raise NotFoundError("Notification not found")
    if notification.user_id != user.id:
        raise ForbiddenError("Only the recipient can update this notification")
    if not notification.is_read:
        notification.is_read = True
        db.session.commit()
    return notification


def mark_all_read_for_user(user_id):
    # row by row so every flip reaches the realtime feed
    unread = get_user_notifications(user_id, is_read=False).all()
    for notification in unread:
        notification.is_read = True
    if unread:
        db.session.commit()
    return len(unread)
