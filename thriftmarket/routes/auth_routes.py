from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from thriftmarket.services.auth_service import register_user, authenticate_user, generate_tokens_for_user
from thriftmarket.utils.auth_utils import current_user
from thriftmarket.utils.response_formatter import success_response, error_response

bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")


@bp.route("/register", methods=["POST"])
def register():
    data = request.get_json() or {}
    full_name = data.get("full_name")
    email = data.get("email")
    password = data.get("password")
    role = data.get("role", "buyer")

    if not all([full_name, email, password]):
        return error_response("VALIDATION_ERROR", "Missing required fields", status=422)

    user = register_user(email, password, full_name, role=role, store_name=data.get("store_name"))
    access, refresh = generate_tokens_for_user(user)
    return success_response({
        "user": user.to_dict(),
        "access_token": access,
        "refresh_token": refresh,
    }, status=201)


@bp.route("/login", methods=["POST"])
def login():
    data = request.get_json() or {}
    email = data.get("email")
    password = data.get("password")
    if not email or not password:
        return error_response("VALIDATION_ERROR", "Email and password are required", status=422)

    user = authenticate_user(email, password)
    access, refresh = generate_tokens_for_user(user)
    return success_response({
        "access_token": access,
        "refresh_token": refresh,
        "user": user.to_dict(),
    })


@bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    # tokens are stateless; the client discards them
    return success_response({"message": "Successfully logged out"})


@bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    return success_response(current_user().to_dict())
