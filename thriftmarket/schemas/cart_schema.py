from marshmallow import fields
from thriftmarket.extensions import ma
from thriftmarket.schemas.product_schema import ProductSummarySchema

class CartItemSchema(ma.Schema):
    id = fields.Str()
    product_id = fields.Str()
    quantity = fields.Int()
    created_at = fields.DateTime()
    product = fields.Nested(ProductSummarySchema)

class CartAddSchema(ma.Schema):
    product_id = fields.Str(required=True)

cart_items_schema = CartItemSchema(many=True)
cart_item_schema = CartItemSchema()
