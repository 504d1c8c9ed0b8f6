from thriftmarket.extensions import db
from thriftmarket.utils.timeutils import utcnow
import uuid

def gen_msg_id():
    return f"msg-{str(uuid.uuid4())[:8]}"

class Message(db.Model):
    __tablename__ = "messages"
    __realtime__ = True

    __table_args__ = (
        db.Index("idx_messages_order_created", "order_id", "created_at"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_msg_id)
    order_id = db.Column(db.String(50), db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    sender_id = db.Column(db.String(50), db.ForeignKey("profiles.id"), nullable=False)
    receiver_id = db.Column(db.String(50), db.ForeignKey("profiles.id"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    order = db.relationship("Order", backref="messages", lazy=True)
    sender = db.relationship("Profile", foreign_keys=[sender_id], lazy=True)
