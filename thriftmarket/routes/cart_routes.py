from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from thriftmarket.schemas.cart_schema import CartAddSchema, cart_item_schema, cart_items_schema
from thriftmarket.services import cart_service
from thriftmarket.utils.auth_utils import current_user
from thriftmarket.utils.response_formatter import success_response

bp = Blueprint("cart", __name__, url_prefix="/api/v1/cart")


@bp.route("", methods=["GET"])
@jwt_required()
def get_cart():
    user = current_user("buyer")
    items = cart_service.list_items(user.id)
    return success_response({"items": cart_items_schema.dump(items), "count": len(items)})


@bp.route("", methods=["POST"])
@jwt_required()
def add_to_cart():
    user = current_user("buyer")
    data = CartAddSchema().load(request.get_json() or {})
    item = cart_service.add_item(user, data["product_id"])
    return success_response({"item": cart_item_schema.dump(item)}, message="Added to cart", status=201)


@bp.route("/<product_id>", methods=["DELETE"])
@jwt_required()
def remove_from_cart(product_id):
    user = current_user("buyer")
    removed = cart_service.remove_item(user.id, product_id)
    return success_response({"removed": removed})


@bp.route("", methods=["DELETE"])
@jwt_required()
def clear_cart():
    user = current_user("buyer")
    return success_response({"removed": cart_service.clear(user.id)})
