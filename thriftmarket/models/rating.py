from thriftmarket.extensions import db
from thriftmarket.utils.timeutils import utcnow
import uuid

def gen_uuid(prefix="rat"):
    return f"{prefix}-{str(uuid.uuid4())[:8]}"

class Rating(db.Model):
    __tablename__ = "ratings"

    __table_args__ = (
        db.Index("idx_ratings_seller_id", "seller_id"),
        db.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_range"),
    )

    id = db.Column(
        db.String(50),
        primary_key=True,
        default=lambda: gen_uuid("rat")
    )

    order_id = db.Column(
        db.String(50),
        db.ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )

    buyer_id = db.Column(
        db.String(50),
        db.ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=False
    )

    seller_id = db.Column(
        db.String(50),
        db.ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=False
    )

    rating = db.Column(db.Integer, nullable=False)
    review = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # Relationships
    order = db.relationship(
        "Order",
        backref=db.backref("rating", uselist=False)
    )

    buyer = db.relationship("Profile", foreign_keys=[buyer_id])
