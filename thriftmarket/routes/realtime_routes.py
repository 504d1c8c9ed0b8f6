import json
import logging

from flask import Blueprint, Response, current_app, request, stream_with_context
from flask_jwt_extended import jwt_required

from thriftmarket.extensions import change_feed
from thriftmarket.services.order_service import get_order_for_party
from thriftmarket.utils.auth_utils import current_user
from thriftmarket.utils.response_formatter import error_response

logger = logging.getLogger(__name__)

bp = Blueprint("realtime", __name__, url_prefix="/api/v1/realtime")


def format_sse(data, event=None):
    msg = f"data: {json.dumps(data)}\n\n"
    if event is not None:
        msg = f"event: {event}\n{msg}"
    return msg


def subscription_filters(table, user, args):
    """Equality filters the caller may listen on for ``table``, or None."""
    if table == "notifications":
        return {"user_id": user.id}

    if table == "orders":
        side = args.get("as", "buyer" if user.role == "buyer" else "seller")
        if side not in ("buyer", "seller"):
            return None
        return {f"{side}_id": user.id}

    if table == "messages":
        order_id = args.get("order_id")
        if not order_id:
            return None
        get_order_for_party(order_id, user)
        return {"order_id": order_id}

    return None


@bp.route("/<table>", methods=["GET"])
@jwt_required()
def stream(table):
    user = current_user()
    filters = subscription_filters(table, user, request.args)
    if filters is None:
        return error_response("VALIDATION_ERROR", f"Cannot subscribe to {table}", status=422)

    heartbeat = current_app.config.get("REALTIME_HEARTBEAT_SECONDS", 15)
    sub = change_feed.subscribe(table, **filters)
    logger.info("Realtime stream %s opened for %s on %s", sub.id, user.id, table)

    def events():
        try:
            yield format_sse({"subscription": sub.id, "table": table}, event="subscribed")
            while not sub.closed:
                change = sub.get(timeout=heartbeat)
                if change is None:
                    yield ": keepalive\n\n"
                    continue
                yield format_sse(change.to_payload(), event=change.type.lower())
        finally:
            sub.close()
            logger.info("Realtime stream %s closed", sub.id)

    return Response(
        stream_with_context(events()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
