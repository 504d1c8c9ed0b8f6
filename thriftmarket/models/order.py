from thriftmarket.extensions import db
from thriftmarket.utils.timeutils import utcnow
import uuid

def gen_order_id():
    return f"ORD-{str(uuid.uuid4())[:8]}"

PENDING = "pending"
CONFIRMED = "confirmed"
SHIPPED = "shipped"
DELIVERED = "delivered"
CANCEL_REQUESTED = "cancel_requested"
CANCELLED = "cancelled"

STATUSES = (PENDING, CONFIRMED, SHIPPED, DELIVERED, CANCEL_REQUESTED, CANCELLED)
TERMINAL_STATUSES = (DELIVERED, CANCELLED)

DELIVERY_METHODS = ("delivery", "pickup")
PAYMENT_FOR_DELIVERY = {
    "delivery": "cod",
    "pickup": "cop",
}
PICKUP_ADDRESS = "For Pickup"

class Order(db.Model):
    __tablename__ = "orders"
    __realtime__ = True

    __table_args__ = (
        db.Index("idx_orders_buyer_id", "buyer_id"),
        db.Index("idx_orders_seller_id", "seller_id"),
        db.Index("idx_orders_product_status", "product_id", "status"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_order_id)

    buyer_id = db.Column(db.String(50), db.ForeignKey("profiles.id"), nullable=False)
    seller_id = db.Column(db.String(50), db.ForeignKey("profiles.id"), nullable=False)
    product_id = db.Column(
        db.String(50),
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False
    )

    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.String(30), nullable=False, default=PENDING)

    shipping_address = db.Column(db.String(512))
    phone = db.Column(db.String(50))
    notes = db.Column(db.Text)
    delivery_method = db.Column(db.String(20), nullable=False, default="delivery")
    payment_method = db.Column(db.String(10), nullable=False, default="cod")
    delivery_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    buyer = db.relationship("Profile", foreign_keys=[buyer_id], backref="purchases", lazy=True)
    seller = db.relationship("Profile", foreign_keys=[seller_id], backref="sales", lazy=True)
    product = db.relationship("Product", backref="orders", lazy=True)

    def party_role(self, user_id):
        if user_id == self.buyer_id:
            return "buyer"
        if user_id == self.seller_id:
            return "seller"
        return None
