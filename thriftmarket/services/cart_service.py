import logging
from sqlalchemy.exc import IntegrityError
from thriftmarket.extensions import db
from thriftmarket.models.cart_item import CartItem
from thriftmarket.models.product import Product
from thriftmarket.utils.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def list_items(user_id):
    return (
        CartItem.query.filter_by(user_id=user_id)
        .order_by(CartItem.created_at.asc())
        .all()
    )


def add_item(user, product_id, quantity=1):
    if user.role != "buyer":
        raise ForbiddenError("Only buyers have a cart")

    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    if product.seller_id == user.id:
        raise ValidationError("You cannot buy your own listing")
    if not product.is_available:
        raise ValidationError("This item is no longer available")

    item = CartItem(user_id=user.id, product_id=product.id, quantity=quantity)
    db.session.add(item)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Item already in cart", code="ALREADY_IN_CART")
    return item


def remove_item(user_id, product_id):
    removed = CartItem.query.filter_by(user_id=user_id, product_id=product_id).delete()
    db.session.commit()
    return removed


def purge_products(user_id, product_ids):
    """Drop the given products from the cart, used when checkout finds them sold."""
    removed = CartItem.query.filter(
        CartItem.user_id == user_id,
        CartItem.product_id.in_(product_ids),
    ).delete(synchronize_session=False)
    db.session.commit()
    logger.info("Removed %d unavailable item(s) from cart of %s", removed, user_id)
    return removed


def clear(user_id, commit=True):
    removed = CartItem.query.filter_by(user_id=user_id).delete()
    if commit:
        db.session.commit()
    return removed
