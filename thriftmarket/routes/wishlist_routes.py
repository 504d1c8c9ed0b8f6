from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from thriftmarket.schemas.cart_schema import cart_item_schema
from thriftmarket.schemas.wishlist_schema import WishlistAddSchema, wishlist_item_schema, wishlist_items_schema
from thriftmarket.services import wishlist_service
from thriftmarket.utils.auth_utils import current_user
from thriftmarket.utils.response_formatter import success_response

bp = Blueprint("wishlist", __name__, url_prefix="/api/v1/wishlist")


@bp.route("", methods=["GET"])
@jwt_required()
def get_wishlist():
    user = current_user("buyer")
    items = wishlist_service.list_items(user.id)
    return success_response({"items": wishlist_items_schema.dump(items), "count": len(items)})


@bp.route("", methods=["POST"])
@jwt_required()
def add_to_wishlist():
    user = current_user("buyer")
    data = WishlistAddSchema().load(request.get_json() or {})
    item = wishlist_service.add_item(user, data["product_id"])
    return success_response({"item": wishlist_item_schema.dump(item)}, message="Added to wishlist", status=201)


@bp.route("/<product_id>", methods=["DELETE"])
@jwt_required()
def remove_from_wishlist(product_id):
    user = current_user("buyer")
    removed = wishlist_service.remove_item(user.id, product_id)
    return success_response({"removed": removed}, message="Removed from wishlist")


@bp.route("/<product_id>/toggle", methods=["POST"])
@jwt_required()
def toggle_wishlist(product_id):
    user = current_user("buyer")
    return success_response({"wishlisted": wishlist_service.toggle(user, product_id)})


@bp.route("/<product_id>/move-to-cart", methods=["POST"])
@jwt_required()
def move_to_cart(product_id):
    user = current_user("buyer")
    item = wishlist_service.move_to_cart(user, product_id)
    return success_response({"item": cart_item_schema.dump(item)}, message="Added to cart!", status=201)
