import logging
from thriftmarket.extensions import db
from thriftmarket.models.message import Message
from thriftmarket.models.order import CANCELLED
from thriftmarket.services.notification_service import notify, preview
from thriftmarket.services.order_service import get_order
from thriftmarket.utils.exceptions import ChatClosed, ForbiddenError, ValidationError

logger = logging.getLogger(__name__)


def _party_order(order_id, user_id):
    order = get_order(order_id)
    if order.party_role(user_id) is None:
        raise ForbiddenError("You are not part of this order")
    return order


def counterpart_id(order, user_id):
    return order.seller_id if user_id == order.buyer_id else order.buyer_id


def list_messages(order_id, user):
    """Complete history of the order's conversation, oldest first."""
    _party_order(order_id, user.id)
    return (
        Message.query.filter_by(order_id=order_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )


def unread_for(order_id, user_id):
    return Message.query.filter_by(order_id=order_id, receiver_id=user_id, is_read=False).count()


def send_message(order_id, sender, content):
    content = (content or "").strip()
    if not content:
        raise ValidationError("content is required", {"field": "content"})

    order = _party_order(order_id, sender.id)
    if order.status == CANCELLED:
        raise ChatClosed()

    receiver_id = counterpart_id(order, sender.id)
    if receiver_id == sender.id:
        raise ValidationError("You cannot message yourself")

    msg = Message(
        order_id=order.id,
        sender_id=sender.id,
        receiver_id=receiver_id,
        content=content,
    )
    db.session.add(msg)
    db.session.commit()

    sender_label = "Buyer" if order.buyer_id == sender.id else "Seller"
    sender_name = sender.full_name or sender_label
    notify(
        receiver_id,
        "message",
        "New Message",
        f'{sender_name} sent you a message: "{preview(content)}"',
    )
    return msg


def mark_thread_read(order_id, user):
    """Flag every message addressed to ``user`` in this thread as read."""
    _party_order(order_id, user.id)
    unread = Message.query.filter_by(order_id=order_id, receiver_id=user.id, is_read=False).all()
    for msg in unread:
        msg.is_read = True
    if unread:
        db.session.commit()
        logger.debug("Marked %d message(s) read on %s for %s", len(unread), order_id, user.id)
    return len(unread)
