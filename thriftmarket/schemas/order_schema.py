from marshmallow import fields, validate
from thriftmarket.extensions import ma
from thriftmarket.models.order import DELIVERY_METHODS, STATUSES
from thriftmarket.schemas.product_schema import PartySchema, ProductSummarySchema

class OrderSchema(ma.Schema):
    id = fields.Str()
    buyer_id = fields.Str()
    seller_id = fields.Str()
    product_id = fields.Str()
    total_amount = fields.Float()
    status = fields.Str()
    shipping_address = fields.Str(allow_none=True)
    phone = fields.Str(allow_none=True)
    notes = fields.Str(allow_none=True)
    delivery_method = fields.Str()
    payment_method = fields.Str()
    delivery_date = fields.Date(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime(allow_none=True)
    product = fields.Nested(ProductSummarySchema, allow_none=True)
    buyer = fields.Nested(PartySchema, allow_none=True)
    seller = fields.Nested(PartySchema, allow_none=True)

class CheckoutSchema(ma.Schema):
    delivery_method = fields.Str(required=True, validate=validate.OneOf(DELIVERY_METHODS))
    phone = fields.Str(load_default=None)
    address = fields.Str(load_default=None, allow_none=True)
    city = fields.Str(load_default=None, allow_none=True)
    postal_code = fields.Str(load_default=None, allow_none=True)
    notes = fields.Str(load_default=None, allow_none=True)
    save_address = fields.Bool(load_default=False)

class StatusUpdateSchema(ma.Schema):
    status = fields.Str(required=True, validate=validate.OneOf(STATUSES))

class CancelResolutionSchema(ma.Schema):
    approve = fields.Bool(required=True)

class DeliveryDateSchema(ma.Schema):
    delivery_date = fields.Date(required=True)

order_schema = OrderSchema()
orders_schema = OrderSchema(many=True)
