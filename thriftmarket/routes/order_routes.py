from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required
from thriftmarket.schemas.order_schema import (
    CancelResolutionSchema,
    CheckoutSchema,
    DeliveryDateSchema,
    StatusUpdateSchema,
    order_schema,
    orders_schema,
)
from thriftmarket.services import order_service
from thriftmarket.utils.auth_utils import current_user
from thriftmarket.utils.pagination import paginate_query
from thriftmarket.utils.response_formatter import success_response

bp = Blueprint("orders", __name__, url_prefix="/api/v1/orders")


# ------------------------------------------------------------
#  POST /orders/checkout: cart to pending orders, all or nothing
# ------------------------------------------------------------
@bp.route("/checkout", methods=["POST"])
@jwt_required()
def checkout():
    user = current_user("buyer")
    data = CheckoutSchema().load(request.get_json() or {})
    orders = order_service.create_orders(user, **data)
    current_app.logger.info("Checkout by %s produced %s", user.id, [o.id for o in orders])
    return success_response(
        {"orders": orders_schema.dump(orders)},
        message=f"{len(orders)} order(s) placed",
        status=201,
    )


# ------------------------------------------------------------
#  GET /orders: buyers see purchases, sellers see sales
# ------------------------------------------------------------
@bp.route("", methods=["GET"])
@jwt_required()
def list_orders():
    user = current_user()
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", 10, type=int)

    q = order_service.orders_query(user, request.args.get("status"))
    items, pagination = paginate_query(q, page, limit)
    return success_response({"orders": orders_schema.dump(items), "pagination": pagination})


@bp.route("/stats", methods=["GET"])
@jwt_required()
def stats():
    user = current_user("seller")
    return success_response({"stats": order_service.seller_stats(user.id)})


@bp.route("/<order_id>", methods=["GET"])
@jwt_required()
def get_order(order_id):
    user = current_user()
    order = order_service.get_order_for_party(order_id, user)
    return success_response({"order": order_schema.dump(order)})


# ------------------------------------------------------------
#  State changes
# ------------------------------------------------------------
@bp.route("/<order_id>/status", methods=["PATCH"])
@jwt_required()
def update_status(order_id):
    user = current_user("seller")
    data = StatusUpdateSchema().load(request.get_json() or {})
    order = order_service.advance_status(order_id, data["status"], user)
    return success_response({"order": order_schema.dump(order)}, message="Order status updated")


@bp.route("/<order_id>/cancel-request", methods=["POST"])
@jwt_required()
def cancel_request(order_id):
    user = current_user("buyer")
    order = order_service.request_cancellation(order_id, user)
    return success_response({"order": order_schema.dump(order)}, message="Cancellation requested")


@bp.route("/<order_id>/cancel-resolution", methods=["POST"])
@jwt_required()
def cancel_resolution(order_id):
    user = current_user("seller")
    data = CancelResolutionSchema().load(request.get_json() or {})
    order = order_service.resolve_cancellation(order_id, data["approve"], user)
    message = "Cancellation approved" if data["approve"] else "Cancellation rejected"
    return success_response({"order": order_schema.dump(order)}, message=message)


@bp.route("/<order_id>/delivery-date", methods=["PUT"])
@jwt_required()
def delivery_date(order_id):
    user = current_user("seller")
    data = DeliveryDateSchema().load(request.get_json() or {})
    order = order_service.set_delivery_date(order_id, data["delivery_date"], user)
    return success_response({"order": order_schema.dump(order)}, message="Delivery date set")
