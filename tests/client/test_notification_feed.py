import pytest

from thriftmarket.client.notification_feed import NotificationFeed
from thriftmarket.extensions import db
from thriftmarket.models.notification import Notification
from thriftmarket.services.notification_service import notify


@pytest.fixture
def feed(buyer):
    feed = NotificationFeed(buyer, limit=20, poll_interval=10)
    feed.subscribe()
    feed.poll(0)
    yield feed
    feed.unsubscribe()


def test_initial_poll_counts_unread(buyer):
    notify(buyer.id, "order", "one", "body")
    notify(buyer.id, "order", "two", "body")
    feed = NotificationFeed(buyer)
    feed.poll()
    assert feed.unread_count == 2
    assert [n.title for n in feed.notifications] == ["two", "one"]


def test_realtime_insert_is_prepended(feed, buyer):
    notify(buyer.id, "order", "fresh", "body")
    assert feed.pump() == 1
    assert feed.notifications[0].title == "fresh"
    assert feed.unread_count == 1


def test_push_and_poll_do_not_double_count(feed, buyer):
    notify(buyer.id, "order", "fresh", "body")
    feed.poll(1)
    assert feed.unread_count == 1
    # the queued push for the same row is now a duplicate
    assert feed.pump() == 0
    assert feed.unread_count == 1
    assert len(feed.notifications) == 1


def test_other_users_notifications_never_arrive(feed, seller):
    notify(seller.id, "order", "not yours", "body")
    assert feed.pump() == 0
    assert feed.notifications == []


def test_update_event_resyncs_from_store(feed, buyer):
    notif = notify(buyer.id, "order", "one", "body")
    feed.pump()
    assert feed.unread_count == 1

    # read on another device
    notif.is_read = True
    db.session.commit()
    feed.pump()
    assert feed.unread_count == 0
    assert feed.notifications[0].is_read is True


def test_tick_polls_on_interval(feed, buyer):
    assert feed.tick(5) is False
    Notification.query.delete()
    db.session.add(Notification(user_id=buyer.id, type="order", title="quiet", message="body"))
    # written without going through the feed's subscription
    feed.unsubscribe()
    db.session.commit()
    assert feed.tick(10) is True
    assert feed.unread_count == 1
    assert feed.tick(15) is False


def test_mark_read_is_optimistic(feed, buyer):
    first = notify(buyer.id, "order", "one", "body")
    notify(buyer.id, "order", "two", "body")
    feed.pump()
    assert feed.unread_count == 2

    feed.mark_read(first.id)
    assert feed.unread_count == 1
    assert db.session.get(Notification, first.id).is_read is True


def test_mark_read_failure_keeps_local_state(feed, buyer):
    feed.mark_read("notif-missing")
    assert feed.unread_count == 0


def test_mark_all_read(feed, buyer):
    notify(buyer.id, "order", "one", "body")
    notify(buyer.id, "order", "two", "body")
    feed.pump()
    feed.mark_all_read()
    assert feed.unread_count == 0
    assert Notification.query.filter_by(user_id=buyer.id, is_read=False).count() == 0
    feed.pump()
    assert feed.unread_count == 0


def test_malformed_payload_is_ignored(feed):
    assert feed.apply({"table": "notifications", "eventType": "INSERT", "new": {"id": "x"}}) is False
    assert feed.unread_count == 0


def test_unread_count_covers_more_than_one_page(buyer):
    for n in range(25):
        notify(buyer.id, "order", f"note {n}", "body")
    feed = NotificationFeed(buyer, limit=20)
    feed.poll()
    assert len(feed.notifications) == 20
    assert feed.unread_count == 25


def test_batch_of_updates_resyncs_once(feed, buyer, monkeypatch):
    rows = [notify(buyer.id, "order", f"note {n}", "body") for n in range(3)]
    feed.pump()
    assert feed.unread_count == 3

    for row in rows:
        row.is_read = True
        db.session.commit()

    calls = []
    original = feed.poll

    def counting_poll(now=None):
        calls.append(now)
        return original(now)

    monkeypatch.setattr(feed, "poll", counting_poll)
    assert feed.pump() == 3
    assert len(calls) == 1
    assert feed.unread_count == 0
