from marshmallow import fields
from thriftmarket.extensions import ma
from thriftmarket.schemas.product_schema import PartySchema, ProductSummarySchema

class WishlistProductSchema(ProductSummarySchema):
    seller = fields.Nested(PartySchema, only=("id", "full_name", "store_name"), allow_none=True)

class WishlistItemSchema(ma.Schema):
    id = fields.Str()
    product_id = fields.Str()
    created_at = fields.DateTime()
    product = fields.Nested(WishlistProductSchema)

class WishlistAddSchema(ma.Schema):
    product_id = fields.Str(required=True)

wishlist_items_schema = WishlistItemSchema(many=True)
wishlist_item_schema = WishlistItemSchema()
