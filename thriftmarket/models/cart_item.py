from thriftmarket.extensions import db
from thriftmarket.utils.timeutils import utcnow
import uuid

def gen_cart_id():
    return f"cart-{str(uuid.uuid4())[:8]}"

class CartItem(db.Model):
    __tablename__ = "cart_items"

    __table_args__ = (
        db.UniqueConstraint("user_id", "product_id", name="uq_cart_user_product"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_cart_id)
    user_id = db.Column(db.String(50), db.ForeignKey("profiles.id"), nullable=False, index=True)
    product_id = db.Column(
        db.String(50),
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False
    )
    quantity = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, default=utcnow)

    product = db.relationship("Product", lazy=True)
