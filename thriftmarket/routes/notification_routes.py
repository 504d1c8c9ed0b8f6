from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from thriftmarket.schemas.notification_schema import notification_schema, notifications_schema
from thriftmarket.services.notification_service import (
    get_user_notifications,
    mark_all_read_for_user,
    mark_notification_read,
    unread_count,
)
from thriftmarket.utils.auth_utils import current_user
from thriftmarket.utils.pagination import paginate_query
from thriftmarket.utils.response_formatter import success_response

bp = Blueprint("notifications", __name__, url_prefix="/api/v1/notifications")


@bp.route("", methods=["GET"])
@jwt_required()
def get_notifications():
    user = current_user()
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", 20, type=int)

    is_read = request.args.get("is_read")
    if is_read is not None:
        is_read = is_read.lower() in ("1", "true", "yes")

    items, pagination = paginate_query(get_user_notifications(user.id, is_read), page, limit)
    return success_response({
        "notifications": notifications_schema.dump(items),
        "unread_count": unread_count(user.id),
        "pagination": pagination,
    })


@bp.route("/<notification_id>/read", methods=["POST"])
@jwt_required()
def mark_read(notification_id):
    user = current_user()
    notification = mark_notification_read(notification_id, user)
    return success_response({"notification": notification_schema.dump(notification)})


@bp.route("/read-all", methods=["POST"])
@jwt_required()
def mark_all_read():
    user = current_user()
    updated = mark_all_read_for_user(user.id)
    return success_response({"updated": updated}, message="Notifications marked as read")
