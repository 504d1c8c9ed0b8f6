from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from thriftmarket.schemas.rating_schema import RatingCreateSchema, rating_schema, ratings_schema
from thriftmarket.services import rating_service
from thriftmarket.utils.auth_utils import current_user
from thriftmarket.utils.response_formatter import success_response

bp = Blueprint("ratings", __name__, url_prefix="/api/v1")


@bp.route("/orders/<order_id>/rating", methods=["POST"])
@jwt_required()
def rate_order(order_id):
    user = current_user("buyer")
    data = RatingCreateSchema().load(request.get_json() or {})
    rating = rating_service.submit_rating(order_id, user, data["rating"], data["review"])
    return success_response({"rating": rating_schema.dump(rating)}, message="Thanks for your rating", status=201)


@bp.route("/orders/<order_id>/rating", methods=["GET"])
@jwt_required()
def get_order_rating(order_id):
    user = current_user()
    rating = rating_service.get_rating(order_id, user)
    return success_response({"rating": rating_schema.dump(rating) if rating else None})


@bp.route("/sellers/<seller_id>/rating-summary", methods=["GET"])
def rating_summary(seller_id):
    summary = rating_service.seller_rating_summary(seller_id)
    reviews = rating_service.recent_reviews(seller_id, limit=request.args.get("limit", 10, type=int))
    return success_response({"summary": summary, "reviews": ratings_schema.dump(reviews)})
