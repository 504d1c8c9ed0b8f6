from marshmallow import fields
from thriftmarket.extensions import ma

class MessageSchema(ma.Schema):
    id = fields.Str()
    order_id = fields.Str()
    sender_id = fields.Str()
    receiver_id = fields.Str()
    content = fields.Str()
    is_read = fields.Bool()
    created_at = fields.DateTime()

class MessageCreateSchema(ma.Schema):
    content = fields.Str(required=True)

message_schema = MessageSchema()
messages_schema = MessageSchema(many=True)
