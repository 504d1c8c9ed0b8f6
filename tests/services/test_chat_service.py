import pytest

from thriftmarket.models.notification import Notification
from thriftmarket.services import chat_service
from thriftmarket.utils.exceptions import ForbiddenError, ValidationError


def test_send_notifies_the_other_party(order, buyer, seller):
    msg = chat_service.send_message(order.id, buyer, "  Can you do 400?  ")
    assert msg.content == "Can you do 400?"
    assert msg.receiver_id == seller.id

    notif = Notification.query.filter_by(user_id=seller.id, type="message").one()
    assert notif.title == "New Message"
    assert notif.message == 'Bea Buyer sent you a message: "Can you do 400?"'


def test_long_messages_are_previewed(order, buyer, seller):
    chat_service.send_message(order.id, seller, "a" * 80)
    notif = Notification.query.filter_by(user_id=buyer.id, type="message").one()
    assert notif.message == f'Sam Seller sent you a message: "{"a" * 50}..."'


def test_history_is_oldest_first(order, buyer, seller):
    for i, sender in enumerate((buyer, seller, buyer)):
        chat_service.send_message(order.id, sender, f"m{i}")
    assert [m.content for m in chat_service.list_messages(order.id, seller)] == ["m0", "m1", "m2"]


def test_strangers_cannot_read_or_write(order, make_user):
    stranger = make_user("buyer")
    with pytest.raises(ForbiddenError):
        chat_service.list_messages(order.id, stranger)
    with pytest.raises(ForbiddenError):
        chat_service.send_message(order.id, stranger, "hi")


def test_empty_content(order, buyer):
    with pytest.raises(ValidationError):
        chat_service.send_message(order.id, buyer, "   ")


def test_mark_thread_read_only_touches_own_inbox(order, buyer, seller):
    chat_service.send_message(order.id, buyer, "one")
    chat_service.send_message(order.id, seller, "two")
    assert chat_service.mark_thread_read(order.id, buyer) == 1
    assert chat_service.unread_for(order.id, seller.id) == 1
