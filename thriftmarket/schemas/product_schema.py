from marshmallow import fields
from thriftmarket.extensions import ma

class ProductSummarySchema(ma.Schema):
    id = fields.Str()
    seller_id = fields.Str()
    title = fields.Str()
    price = fields.Float()
    shipping_fee = fields.Float()
    size = fields.Str(allow_none=True)
    condition = fields.Str(allow_none=True)
    images = fields.List(fields.Str())
    is_available = fields.Bool()

class PartySchema(ma.Schema):
    id = fields.Str()
    full_name = fields.Str(allow_none=True)
    store_name = fields.Str(allow_none=True)
    avatar_url = fields.Str(allow_none=True)
