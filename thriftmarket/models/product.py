from thriftmarket.extensions import db
from thriftmarket.utils.timeutils import utcnow
import uuid

def gen_product_id():
    return f"prd-{str(uuid.uuid4())[:8]}"

class Product(db.Model):
    __tablename__ = "products"
    __realtime__ = True

    id = db.Column(db.String(50), primary_key=True, default=gen_product_id)
    seller_id = db.Column(db.String(50), db.ForeignKey("profiles.id"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    shipping_fee = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    category = db.Column(db.String(100))
    size = db.Column(db.String(50))
    condition = db.Column(db.String(50))
    images = db.Column(db.JSON, default=list)

    # false while an active order holds the item
    is_available = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=utcnow)

    seller = db.relationship("Profile", backref="products", lazy=True)
