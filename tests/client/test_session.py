import pytest

from thriftmarket.client.session import SessionContext
from thriftmarket.extensions import change_feed
from thriftmarket.services import cart_service, chat_service
from thriftmarket.services.notification_service import notify
from thriftmarket.utils.exceptions import AccountSuspended


def test_init_loads_cart_and_inbox(buyer, product):
    cart_service.add_item(buyer, product.id)
    notify(buyer.id, "order", "Welcome", "body")

    session = SessionContext(buyer.id).init()
    assert session.is_active
    assert [line["product_id"] for line in session.cart] == [product.id]
    assert session.notifications.unread_count == 1
    assert session.notifications.is_subscribed
    session.teardown()


def test_sellers_have_no_cart_snapshot(seller):
    session = SessionContext(seller.id).init()
    assert session.cart == []
    session.teardown()


def test_suspended_account_is_signed_out(make_user):
    user = make_user("buyer", is_suspended=True)
    before = change_feed.subscriber_count()
    session = SessionContext(user.id)
    with pytest.raises(AccountSuspended):
        session.init()
    assert not session.is_active
    assert change_feed.subscriber_count() == before


def test_teardown_closes_everything(order, buyer, product):
    before = change_feed.subscriber_count()
    session = SessionContext(buyer.id).init()
    channel = session.open_chat(order.id)
    assert session.open_chat(order.id) is channel
    assert change_feed.subscriber_count() == before + 2

    session.teardown()
    assert change_feed.subscriber_count() == before
    assert not channel.is_open
    assert session.channels == {}
    assert session.cart == []
    assert session.notifications is None


def test_pump_drives_feed_and_channels(order, buyer, seller):
    session = SessionContext(buyer.id).init()
    session.open_chat(order.id)

    chat_service.send_message(order.id, seller, "Shipping tomorrow")

    # message insert plus its "New Message" notification
    assert session.pump() == 2
    assert session.notifications.notifications[0].title == "New Message"
    assert session.channels[order.id].messages[-1].content == "Shipping tomorrow"
    session.teardown()


def test_tick_before_init_is_harmless(buyer):
    assert SessionContext(buyer.id).tick(100) is False
