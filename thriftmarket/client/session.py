"""
Per-user client session.

Holds everything a signed-in user keeps open: the notification feed, the chat
channels for orders they are looking at and, for buyers, a cart snapshot.
``init`` and ``teardown`` bracket its lifetime.
"""
import logging

from thriftmarket.client.chat_channel import ChatChannel
from thriftmarket.client.notification_feed import NotificationFeed
from thriftmarket.schemas.cart_schema import cart_items_schema
from thriftmarket.services import cart_service
from thriftmarket.utils.auth_utils import load_profile
from thriftmarket.utils.exceptions import AccountSuspended

logger = logging.getLogger(__name__)


class SessionContext:
    def __init__(self, user_id):
        self.user_id = user_id
        self.user = None
        self.cart = []
        self.notifications = None
        self.channels = {}

    @property
    def is_active(self):
        return self.user is not None

    def init(self):
        try:
            self.user = load_profile(self.user_id)
        except AccountSuspended:
            logger.info("Signing out suspended account %s", self.user_id)
            self.teardown()
            raise

        if self.user.role == "buyer":
            self.refresh_cart()

        self.notifications = NotificationFeed(self.user)
        self.notifications.subscribe()
        self.notifications.poll()
        return self

    def refresh_cart(self):
        self.cart = cart_items_schema.dump(cart_service.list_items(self.user_id))
        return self.cart

    def open_chat(self, order_id, other_user_id=None):
        channel = self.channels.get(order_id)
        if channel is None:
            channel = ChatChannel(self.user, order_id, other_user_id)
            channel.open()
            self.channels[order_id] = channel
        return channel

    def close_chat(self, order_id):
        channel = self.channels.pop(order_id, None)
        if channel is not None:
            channel.close()

    def pump(self):
        """Apply every queued realtime change; returns how many took effect."""
        applied = 0
        if self.notifications is not None:
            applied += self.notifications.pump()
        for channel in list(self.channels.values()):
            applied += channel.pump()
        return applied

    def tick(self, now):
        if self.notifications is None:
            return False
        return self.notifications.tick(now)

    def teardown(self):
        for order_id in list(self.channels):
            self.close_chat(order_id)
        if self.notifications is not None:
            self.notifications.unsubscribe()
            self.notifications = None
        self.cart = []
        self.user = None
