from flask import jsonify


def success_response(payload=None, message=None, status=200):
    body = {"success": True}
    if isinstance(payload, dict):
        body.update(payload)
    elif payload is not None:
        body["data"] = payload
    if message:
        body["message"] = message
    return jsonify(body), status


def error_response(code, message, details=None, status=400):
    return jsonify({
        "success": False,
        "error": {"code": code, "message": message, "details": details or {}},
    }), status


def service_error_response(err):
    """Render a ServiceError with its own status."""
    return error_response(err.code, err.message, err.details, status=err.status)
