"""
Inventory guard.

A product is held (``is_available = False``) while an order references it in a
non-terminal state, and released when that order is cancelled. Reservation is
a single conditional UPDATE so two buyers can never both hold the same item.
"""
import logging
from sqlalchemy import update
from thriftmarket.extensions import change_feed, db
from thriftmarket.models.order import Order, TERMINAL_STATUSES
from thriftmarket.models.product import Product
from thriftmarket.realtime.change_feed import UPDATE

logger = logging.getLogger(__name__)


def find_unavailable(product_ids):
    return Product.query.filter(
        Product.id.in_(product_ids),
        Product.is_available.is_(False),
    ).all()


def mark_products_sold(product_ids):
    """
    Reserve every product in one statement, only where still available.

    Returns the number of products that were flipped; the caller compares it
    with the number it asked for. Does not commit.
    """
    ids = sorted(set(product_ids))
    if not ids:
        return 0

    result = db.session.execute(
        update(Product)
        .where(Product.id.in_(ids), Product.is_available.is_(True))
        .values(is_available=False)
        .execution_options(synchronize_session=False)
    )

    reserved = Product.query.filter(Product.id.in_(ids)).populate_existing().all()
    for product in reserved:
        change_feed.stage(db.session, UPDATE, product)

    logger.debug("Reserved %d of %d products", result.rowcount, len(ids))
    return result.rowcount


def restore_availability(order):
    """
    Release the hold taken by ``order``. Does not commit.

    Returns True only when the flag actually flipped, so replaying a
    cancellation never restores twice.
    """
    product = db.session.get(Product, order.product_id)
    if product is None:
        logger.warning("Order %s references missing product %s", order.id, order.product_id)
        return False
    if product.is_available:
        return False

    other_holder = Order.query.filter(
        Order.product_id == order.product_id,
        Order.id != order.id,
        Order.status.notin_(TERMINAL_STATUSES),
    ).first()
    if other_holder:
        logger.warning(
            "Product %s still held by order %s, not restoring for %s",
            product.id, other_holder.id, order.id,
        )
        return False

    product.is_available = True
    logger.info("Product %s available again after order %s", product.id, order.id)
    return True
