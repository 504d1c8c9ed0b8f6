from thriftmarket.extensions import db
from thriftmarket.utils.timeutils import utcnow
import uuid

def gen_wish_id():
    return f"wish-{str(uuid.uuid4())[:8]}"

class WishlistItem(db.Model):
    __tablename__ = "wishlist"

    __table_args__ = (
        db.UniqueConstraint("user_id", "product_id", name="uq_wishlist_user_product"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_wish_id)
    user_id = db.Column(db.String(50), db.ForeignKey("profiles.id"), nullable=False, index=True)
    product_id = db.Column(
        db.String(50),
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False
    )
    created_at = db.Column(db.DateTime, default=utcnow)

    product = db.relationship("Product", lazy=True)
