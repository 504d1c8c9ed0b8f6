import logging
from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

from dateutil import parser
from flask import current_app
from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError

from thriftmarket.extensions import change_feed, db
from thriftmarket.models.order import (
    Order,
    STATUSES,
    PENDING,
    CONFIRMED,
    SHIPPED,
    DELIVERED,
    CANCEL_REQUESTED,
    CANCELLED,
    DELIVERY_METHODS,
    PAYMENT_FOR_DELIVERY,
    PICKUP_ADDRESS,
)
from thriftmarket.models.product import Product
from thriftmarket.realtime.change_feed import UPDATE
from thriftmarket.services import cart_service, inventory_service
from thriftmarket.services.notification_service import build_notification, send_notifications
from thriftmarket.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransition,
    InventoryError,
    NotFoundError,
    ProductsUnavailable,
    ValidationError,
)
from thriftmarket.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


# Every legal edge of the order state machine.
ORDER_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED, CANCEL_REQUESTED},
    CONFIRMED: {SHIPPED, CANCELLED, CANCEL_REQUESTED},
    SHIPPED: {DELIVERED},
    CANCEL_REQUESTED: {CANCELLED, CONFIRMED},
    DELIVERED: set(),
    CANCELLED: set(),
}

# Edges a seller may take directly; cancel_requested is resolved separately.
SELLER_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED},
    CONFIRMED: {SHIPPED, CANCELLED},
    SHIPPED: {DELIVERED},
}

BUYER_CANCELLABLE = (PENDING, CONFIRMED)

STATUS_MESSAGES = {
    CONFIRMED: 'Your order for "{title}" has been confirmed by the seller!',
    SHIPPED: 'Great news! Your order for "{title}" has been shipped!',
    DELIVERED: 'Your order for "{title}" has been marked as delivered. Enjoy!',
    CANCELLED: 'Your order for "{title}" has been cancelled by the seller.',
}

SELLER_DASHBOARD_LINK = "/seller/dashboard"


def buyer_order_link(order_id):
    return f"/buyer/orders/{order_id}"


def can_transition(current, new_status):
    return new_status in ORDER_TRANSITIONS.get(current, ())


def compute_total(price, quantity):
    amount = Decimal(str(price)) * int(quantity)
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_money(value):
    symbol = current_app.config.get("CURRENCY_SYMBOL", "₱")
    return f"{symbol}{Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"


# ------------------------------------------------------------
#  Lookups
# ------------------------------------------------------------

def get_order(order_id):
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


def get_order_for_party(order_id, user):
    order = get_order(order_id)
    if user.role != "admin" and order.party_role(user.id) is None:
        raise ForbiddenError("You are not part of this order")
    return order


def orders_query(user, status=None):
    q = Order.query
    if user.role == "buyer":
        q = q.filter(Order.buyer_id == user.id)
    elif user.role == "seller":
        q = q.filter(Order.seller_id == user.id)

    if status:
        if status not in STATUSES:
            raise ValidationError(f"Unknown status {status}", {"field": "status"})
        q = q.filter(Order.status == status)

    return q.order_by(Order.created_at.desc(), Order.id.desc())


def seller_stats(seller_id):
    revenue = (
        db.session.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.seller_id == seller_id, Order.status == DELIVERED)
        .scalar()
    )
    by_status = dict(
        db.session.query(Order.status, func.count(Order.id))
        .filter(Order.seller_id == seller_id)
        .group_by(Order.status)
        .all()
    )
    total_products = Product.query.filter_by(seller_id=seller_id).count()
    active_listings = Product.query.filter_by(seller_id=seller_id, is_available=True).count()

    return {
        "total_products": total_products,
        "active_listings": active_listings,
        "total_revenue": float(revenue or 0),
        "orders_by_status": {s: by_status.get(s, 0) for s in STATUSES},
    }


def _require_seller(order, actor):
    if order.seller_id != actor.id:
        raise ForbiddenError("Only the seller of this order can do this")


def _require_buyer(order, actor):
    if order.buyer_id != actor.id:
        raise ForbiddenError("Only the buyer of this order can do this")


def _product_title(order):
    return order.product.title if order.product else "your item"


# ------------------------------------------------------------
#  State changes
# ------------------------------------------------------------

def _transition(order, allowed_from, new_status, *criteria, **values):
    """
    Compare-and-set the order status.

    The UPDATE only matches while the row is still in one of ``allowed_from``,
    so a stale or replayed request cannot move an order along an edge it has
    already left. Does not commit.
    """
    values.update(status=new_status, updated_at=utcnow())
    result = db.session.execute(
        update(Order)
        .where(Order.id == order.id, Order.status.in_(allowed_from), *criteria)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        current = db.session.get(Order, order.id)
        raise InvalidTransition(current.status if current else None, new_status)

    db.session.refresh(order)
    change_feed.stage(db.session, UPDATE, order)
    return order


def _commit(action, order):
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to %s order %s", action, order.id)
        raise


def advance_status(order_id, new_status, actor):
    if new_status not in STATUSES:
        raise ValidationError(f"Unknown status {new_status}", {"field": "status"})

    order = get_order(order_id)
    _require_seller(order, actor)

    if new_status == CANCELLED and order.status == CANCELLED:
        logger.info("Order %s is already cancelled", order.id)
        return order

    if new_status not in SELLER_TRANSITIONS.get(order.status, set()):
        raise InvalidTransition(order.status, new_status)

    previous = order.status
    allowed_from = [s for s, targets in SELLER_TRANSITIONS.items() if new_status in targets]
    _transition(order, allowed_from, new_status)

    if new_status == CANCELLED:
        inventory_service.restore_availability(order)

    _commit("advance", order)
    logger.info("Order %s moved %s -> %s by seller %s", order.id, previous, new_status, actor.id)

    send_notifications([
        build_notification(
            order.buyer_id,
            "status_change",
            f"Order {new_status.capitalize()}",
            STATUS_MESSAGES[new_status].format(title=_product_title(order)),
            buyer_order_link(order.id),
        )
    ])
    return order


def request_cancel_order(order_id, buyer_id):
    """
    Atomically move a buyer's own pending or confirmed order to
    cancel_requested. The inventory hold is kept. Does not commit.
    """
    order = get_order(order_id)
    return _transition(order, BUYER_CANCELLABLE, CANCEL_REQUESTED, Order.buyer_id == buyer_id)


def request_cancellation(order_id, actor):
    order = get_order(order_id)
    _require_buyer(order, actor)

    if order.status not in BUYER_CANCELLABLE:
        raise InvalidTransition(
            order.status,
            CANCEL_REQUESTED,
            "Cancellation can only be requested before the order ships",
        )

    request_cancel_order(order.id, actor.id)
    _commit("request cancellation of", order)
    logger.info("Buyer %s requested cancellation of order %s", actor.id, order.id)

    send_notifications([
        build_notification(
            order.seller_id,
            "cancel_request",
            "Cancellation Requested",
            f'Buyer requested to cancel the order for "{_product_title(order)}"',
            SELLER_DASHBOARD_LINK,
        )
    ])
    return order


def resolve_cancellation(order_id, approve, actor):
    order = get_order(order_id)
    _require_seller(order, actor)

    target = CANCELLED if approve else CONFIRMED
    if order.status != CANCEL_REQUESTED:
        raise InvalidTransition(order.status, target, "There is no pending cancellation request")

    _transition(order, (CANCEL_REQUESTED,), target)
    if approve:
        inventory_service.restore_availability(order)

    _commit("resolve cancellation of", order)
    logger.info(
        "Seller %s %s cancellation of order %s",
        actor.id, "approved" if approve else "rejected", order.id,
    )

    title = _product_title(order)
    if approve:
        notif = build_notification(
            order.buyer_id,
            "status_change",
            "Cancellation Approved",
            f'Your cancellation request for "{title}" has been approved.',
            buyer_order_link(order.id),
        )
    else:
        notif = build_notification(
            order.buyer_id,
            "status_change",
            "Cancellation Rejected",
            f'Your cancellation request for "{title}" has been rejected by the seller. The order continues.',
            buyer_order_link(order.id),
        )
    send_notifications([notif])
    return order


def parse_delivery_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError("Please select a delivery date", {"field": "delivery_date"})
    try:
        return parser.isoparse(str(value)).date()
    except (ValueError, OverflowError):
        raise ValidationError("Invalid delivery date format", {"field": "delivery_date"})


def set_delivery_date(order_id, delivery_date, actor):
    delivery_date = parse_delivery_date(delivery_date)
    if delivery_date < utcnow().date():
        raise ValidationError("Delivery date cannot be in the past", {"field": "delivery_date"})

    order = get_order(order_id)
    _require_seller(order, actor)

    if order.status != CONFIRMED:
        raise InvalidTransition(
            order.status, CONFIRMED, "Delivery date can only be set on confirmed orders"
        )

    _transition(order, (CONFIRMED,), CONFIRMED, delivery_date=delivery_date)
    _commit("schedule", order)
    logger.info("Order %s scheduled for %s", order.id, delivery_date.isoformat())

    if current_app.config.get("NOTIFY_ON_DELIVERY_DATE"):
        send_notifications([
            build_notification(
                order.buyer_id,
                "status_change",
                "Delivery Date Set",
                f'Your order for "{_product_title(order)}" is scheduled for {delivery_date.strftime("%B %d, %Y")}.',
                buyer_order_link(order.id),
            )
        ])
    return order


# ------------------------------------------------------------
#  Checkout
# ------------------------------------------------------------

def _shipping_address(delivery_method, address, city, postal_code):
    if delivery_method == "pickup":
        return PICKUP_ADDRESS
    return f"{address}, {city}, {postal_code}"


def _reject_unavailable(buyer_id, products):
    details = [{"id": p.id, "title": p.title} for p in products]
    cart_service.purge_products(buyer_id, [p["id"] for p in details])
    logger.info("Checkout for %s rejected, unavailable: %s", buyer_id, [p["id"] for p in details])
    raise ProductsUnavailable(details)


def _new_order_notifications(orders):
    by_seller = OrderedDict()
    for order in orders:
        by_seller.setdefault(order.seller_id, []).append(order)

    notifications = []
    for seller_id, seller_orders in by_seller.items():
        if len(seller_orders) == 1:
            order = seller_orders[0]
            message = (
                f'You have a new order for "{_product_title(order)}" - '
                f"{format_money(order.total_amount)}"
            )
        else:
            titles = ", ".join(f'"{_product_title(o)}"' for o in seller_orders)
            total = sum(Decimal(str(o.total_amount)) for o in seller_orders)
            message = f"You have {len(seller_orders)} new orders: {titles} - {format_money(total)}"
        notifications.append(
            build_notification(seller_id, "order", "New Order Received!", message, SELLER_DASHBOARD_LINK)
        )
    return notifications


def create_orders(
    buyer,
    delivery_method,
    phone=None,
    address=None,
    city=None,
    postal_code=None,
    notes=None,
    save_address=False,
):
    """
    Turn the buyer's cart into one pending order per line, all or nothing.

    If any product was sold since it was added to the cart, no order is
    created, those lines are dropped from the cart and ProductsUnavailable is
    raised so the caller can re-fetch the cart before retrying.
    """
    if buyer.role != "buyer":
        raise ForbiddenError("Only buyers can check out")
    if delivery_method not in DELIVERY_METHODS:
        raise ValidationError(
            "delivery_method must be 'delivery' or 'pickup'", {"field": "delivery_method"}
        )

    missing = [] if phone else ["phone"]
    if delivery_method == "delivery":
        missing += [
            name for name, value in
            (("address", address), ("city", city), ("postal_code", postal_code))
            if not value
        ]
    if missing:
        raise ValidationError("Missing fields", {"fields": missing})

    lines = cart_service.list_items(buyer.id)
    if not lines:
        raise ValidationError("Your cart is empty")

    unavailable = [line.product for line in lines if not line.product.is_available]
    if unavailable:
        _reject_unavailable(buyer.id, unavailable)

    buyer_id = buyer.id
    shipping_address = _shipping_address(delivery_method, address, city, postal_code)
    orders = [
        Order(
            buyer_id=buyer_id,
            seller_id=line.product.seller_id,
            product_id=line.product_id,
            total_amount=compute_total(line.product.price, line.quantity),
            status=PENDING,
            shipping_address=shipping_address,
            phone=phone,
            notes=notes,
            delivery_method=delivery_method,
            payment_method=PAYMENT_FOR_DELIVERY[delivery_method],
        )
        for line in lines
    ]
    product_ids = [line.product_id for line in lines]

    try:
        db.session.add_all(orders)
        db.session.flush()
        reserved = inventory_service.mark_products_sold(product_ids)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Checkout for %s failed while reserving %s", buyer_id, product_ids)
        raise InventoryError(details={"product_ids": product_ids})

    if reserved != len(set(product_ids)):
        # another buyer committed first; nothing of this batch survives
        db.session.rollback()
        lost = inventory_service.find_unavailable(product_ids)
        logger.warning(
            "Checkout race for %s: reserved %d of %d products", buyer_id, reserved, len(product_ids)
        )
        if not lost:
            raise ConflictError("Your cart changed during checkout, please try again")
        _reject_unavailable(buyer_id, lost)

    cart_service.clear(buyer_id, commit=False)
    if save_address:
        buyer.phone = phone
        if delivery_method == "delivery":
            buyer.address = address
            buyer.city = city
            buyer.postal_code = postal_code

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Checkout commit failed for %s", buyer_id)
        raise InventoryError(details={"product_ids": product_ids})

    logger.info("Buyer %s placed %d order(s)", buyer_id, len(orders))
    send_notifications(_new_order_notifications(orders))
    return orders
