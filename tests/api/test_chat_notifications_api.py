import pytest

from thriftmarket.routes.realtime_routes import format_sse, subscription_filters
from thriftmarket.utils.exceptions import ForbiddenError


def test_chat_round_trip(client, order, buyer, seller, auth_headers):
    url = f"/api/v1/orders/{order.id}/messages"
    sent = client.post(url, json={"content": "Hi! Still available?"}, headers=auth_headers(buyer))
    assert sent.status_code == 201

    thread = client.get(url, headers=auth_headers(seller)).get_json()
    assert thread["unread_count"] == 1
    assert [m["content"] for m in thread["messages"]] == ["Hi! Still available?"]

    read = client.post(f"{url}/read", headers=auth_headers(seller)).get_json()
    assert read["updated"] == 1


def test_chat_is_party_only(client, order, make_user, auth_headers):
    response = client.get(f"/api/v1/orders/{order.id}/messages", headers=auth_headers(make_user("buyer")))
    assert response.status_code == 403


def test_chat_closed_after_cancel(client, order, buyer, seller, auth_headers):
    client.patch(f"/api/v1/orders/{order.id}/status", json={"status": "cancelled"}, headers=auth_headers(seller))
    response = client.post(
        f"/api/v1/orders/{order.id}/messages", json={"content": "hello"}, headers=auth_headers(buyer),
    )
    assert response.status_code == 409
    assert response.get_json()["error"]["code"] == "CHAT_CLOSED"


def test_notification_inbox(client, order, seller, auth_headers):
    headers = auth_headers(seller)
    inbox = client.get("/api/v1/notifications", headers=headers).get_json()
    assert inbox["unread_count"] == 1
    [notif] = inbox["notifications"]
    assert notif["title"] == "New Order Received!"

    marked = client.post(f"/api/v1/notifications/{notif['id']}/read", headers=headers)
    assert marked.get_json()["notification"]["is_read"] is True

    unread = client.get("/api/v1/notifications?is_read=false", headers=headers).get_json()
    assert unread["notifications"] == []


def test_read_all(client, order, seller, auth_headers):
    headers = auth_headers(seller)
    assert client.post("/api/v1/notifications/read-all", headers=headers).get_json()["updated"] == 1
    assert client.get("/api/v1/notifications", headers=headers).get_json()["unread_count"] == 0


def test_cannot_read_someone_elses_notification(client, order, seller, buyer, auth_headers):
    notif_id = client.get("/api/v1/notifications", headers=auth_headers(seller)).get_json()["notifications"][0]["id"]
    response = client.post(f"/api/v1/notifications/{notif_id}/read", headers=auth_headers(buyer))
    assert response.status_code == 403


def test_format_sse():
    assert format_sse({"a": 1}) == 'data: {"a": 1}\n\n'
    assert format_sse({"a": 1}, event="insert") == 'event: insert\ndata: {"a": 1}\n\n'


def test_subscription_filters(order, buyer, seller, make_user):
    assert subscription_filters("notifications", buyer, {}) == {"user_id": buyer.id}
    assert subscription_filters("orders", buyer, {}) == {"buyer_id": buyer.id}
    assert subscription_filters("orders", seller, {}) == {"seller_id": seller.id}
    assert subscription_filters("messages", seller, {"order_id": order.id}) == {"order_id": order.id}
    assert subscription_filters("messages", seller, {}) is None
    assert subscription_filters("profiles", buyer, {}) is None
    with pytest.raises(ForbiddenError):
        subscription_filters("messages", make_user("buyer"), {"order_id": order.id})


def test_realtime_rejects_unknown_table(client, buyer, auth_headers):
    response = client.get("/api/v1/realtime/profiles", headers=auth_headers(buyer))
    assert response.status_code == 422
