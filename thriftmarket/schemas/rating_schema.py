from marshmallow import fields
from thriftmarket.extensions import ma
from thriftmarket.schemas.product_schema import PartySchema

class RatingSchema(ma.Schema):
    id = fields.Str()
    order_id = fields.Str()
    buyer_id = fields.Str()
    seller_id = fields.Str()
    rating = fields.Int()
    review = fields.Str(allow_none=True)
    created_at = fields.DateTime()
    buyer = fields.Nested(PartySchema, only=("id", "full_name", "avatar_url"), allow_none=True)

class RatingCreateSchema(ma.Schema):
    rating = fields.Int(required=True, strict=True)
    review = fields.Str(load_default=None, allow_none=True)

rating_schema = RatingSchema()
ratings_schema = RatingSchema(many=True)
