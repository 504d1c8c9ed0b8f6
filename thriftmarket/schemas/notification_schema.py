from marshmallow import fields
from thriftmarket.extensions import ma

class NotificationSchema(ma.Schema):
    id = fields.Str()
    user_id = fields.Str()
    type = fields.Str()
    title = fields.Str()
    message = fields.Str()
    link = fields.Str(allow_none=True)
    is_read = fields.Bool()
    created_at = fields.DateTime()

notification_schema = NotificationSchema()
notifications_schema = NotificationSchema(many=True)
