import logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from thriftmarket.extensions import db
from thriftmarket.models.order import DELIVERED
from thriftmarket.models.rating import Rating
from thriftmarket.services.notification_service import notify, preview
from thriftmarket.services.order_service import get_order, get_order_for_party, SELLER_DASHBOARD_LINK
from thriftmarket.utils.exceptions import ConflictError, ForbiddenError, InvalidTransition, ValidationError

logger = logging.getLogger(__name__)

ALREADY_RATED = "You have already rated this order"
MAX_REVIEWS = 50


def validate_rating(rating):
    # bool is an int subclass
    if isinstance(rating, bool) or not isinstance(rating, int) or rating < 1 or rating > 5:
        raise ValidationError("Rating must be an integer between 1 and 5", {"field": "rating"})
    return rating


def submit_rating(order_id, buyer, rating, review=None):
    validate_rating(rating)
    review = (review or "").strip() or None

    order = get_order(order_id)
    if order.buyer_id != buyer.id:
        raise ForbiddenError("You do not own this order")
    if order.status != DELIVERED:
        raise InvalidTransition(order.status, DELIVERED, "You can only rate delivered orders")

    seller_id = order.seller_id
    entry = Rating(
        order_id=order.id,
        buyer_id=buyer.id,
        seller_id=seller_id,
        rating=rating,
        review=review,
    )
    db.session.add(entry)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.info("Duplicate rating for order %s by %s", order_id, buyer.id)
        raise ConflictError(ALREADY_RATED, code="ALREADY_RATED")

    message = f"You received a {rating}-star rating"
    if review:
        message += f' with review: "{preview(review)}"'
    notify(seller_id, "order", "New Rating Received", message, SELLER_DASHBOARD_LINK)
    return entry


def get_rating(order_id, user):
    get_order_for_party(order_id, user)
    return Rating.query.filter_by(order_id=order_id).first()


def seller_rating_summary(seller_id):
    average, count = (
        db.session.query(func.avg(Rating.rating), func.count(Rating.id))
        .filter(Rating.seller_id == seller_id)
        .one()
    )
    return {
        "seller_id": seller_id,
        "average": round(float(average), 2) if average is not None else None,
        "count": count,
    }


def recent_reviews(seller_id, limit=10):
    limit = min(max(int(limit or 10), 1), MAX_REVIEWS)
    return (
        Rating.query.filter_by(seller_id=seller_id)
        .order_by(Rating.created_at.desc())
        .limit(limit)
        .all()
    )
