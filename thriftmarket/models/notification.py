from thriftmarket.extensions import db
from thriftmarket.utils.timeutils import utcnow
import uuid

def gen_notif_id():
    return f"notif-{str(uuid.uuid4())[:8]}"

TYPES = ("order", "message", "status_change", "cancel_request")

class Notification(db.Model):
    __tablename__ = "notifications"
    __realtime__ = True

    __table_args__ = (
        db.Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_notif_id)
    # recipient; only they may flip is_read
    user_id = db.Column(db.String(50), db.ForeignKey("profiles.id"), nullable=False)

    type = db.Column(db.String(30), nullable=False, default="order")
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    link = db.Column(db.String(512), nullable=True)

    is_read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    recipient = db.relationship("Profile", backref="notifications", lazy=True)
