from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from thriftmarket.schemas.chat_schema import MessageCreateSchema, message_schema, messages_schema
from thriftmarket.services import chat_service
from thriftmarket.utils.auth_utils import current_user
from thriftmarket.utils.response_formatter import success_response

bp = Blueprint("chat", __name__, url_prefix="/api/v1/orders")


@bp.route("/<order_id>/messages", methods=["GET"])
@jwt_required()
def get_messages(order_id):
    user = current_user()
    messages = chat_service.list_messages(order_id, user)
    return success_response({
        "messages": messages_schema.dump(messages),
        "unread_count": chat_service.unread_for(order_id, user.id),
    })


@bp.route("/<order_id>/messages", methods=["POST"])
@jwt_required()
def send_message(order_id):
    user = current_user()
    data = MessageCreateSchema().load(request.get_json() or {})
    msg = chat_service.send_message(order_id, user, data["content"])
    return success_response({"message": message_schema.dump(msg)}, status=201)


@bp.route("/<order_id>/messages/read", methods=["POST"])
@jwt_required()
def mark_read(order_id):
    user = current_user()
    updated = chat_service.mark_thread_read(order_id, user)
    return success_response({"updated": updated})
