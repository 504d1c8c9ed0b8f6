"""
Buyer wishlist. Saved items stay listed after they sell, only moving one to
the cart requires the product to still be available.
"""
import logging
from sqlalchemy.exc import IntegrityError
from thriftmarket.extensions import db
from thriftmarket.models.product import Product
from thriftmarket.models.wishlist_item import WishlistItem
from thriftmarket.services import cart_service
from thriftmarket.utils.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _require_buyer(user):
    if user.role != "buyer":
        raise ForbiddenError("Only buyers can use wishlist")


def list_items(user_id):
    """Newest first."""
    return (
        WishlistItem.query.filter_by(user_id=user_id)
        .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        .all()
    )


def contains(user_id, product_id):
    return WishlistItem.query.filter_by(user_id=user_id, product_id=product_id).first() is not None


def add_item(user, product_id):
    _require_buyer(user)
    if not db.session.get(Product, product_id):
        raise NotFoundError("Product not found")

    item = WishlistItem(user_id=user.id, product_id=product_id)
    db.session.add(item)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Item already in wishlist", code="ALREADY_IN_WISHLIST")
    return item


def remove_item(user_id, product_id):
    removed = WishlistItem.query.filter_by(user_id=user_id, product_id=product_id).delete()
    db.session.commit()
    return removed


def toggle(user, product_id):
    """Add when absent, remove when present; returns the new state."""
    _require_buyer(user)
    if contains(user.id, product_id):
        remove_item(user.id, product_id)
        return False
    add_item(user, product_id)
    return True


def move_to_cart(user, product_id):
    """Copy a saved item into the cart. The wishlist entry is kept."""
    if not contains(user.id, product_id):
        raise NotFoundError("Item is not in your wishlist")
    product = db.session.get(Product, product_id)
    if not product.is_available:
        raise ValidationError("This item is sold out")
    item = cart_service.add_item(user, product_id)
    logger.info("Buyer %s moved %s from wishlist to cart", user.id, product_id)
    return item
