from thriftmarket.extensions import db
from thriftmarket.utils.timeutils import utcnow, isoformat
import uuid

ROLES = ("buyer", "seller", "admin")

def gen_uuid(prefix=None):
    uid = str(uuid.uuid4())
    return f"{prefix}-{uid}" if prefix else uid

class Profile(db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.String(50), primary_key=True, default=lambda: gen_uuid("usr"))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255))
    role = db.Column(db.String(20), nullable=False, default="buyer")
    avatar_url = db.Column(db.String(1024), nullable=True)

    phone = db.Column(db.String(50), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    postal_code = db.Column(db.String(20), nullable=True)

    # sellers only
    store_name = db.Column(db.String(255), nullable=True)
    store_description = db.Column(db.Text, nullable=True)

    is_suspended = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "avatar_url": self.avatar_url,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "postal_code": self.postal_code,
            "store_name": self.store_name,
            "store_description": self.store_description,
            "is_suspended": self.is_suspended,
            "created_at": isoformat(self.created_at),
        }
