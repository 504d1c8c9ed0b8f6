from thriftmarket.extensions import db
from thriftmarket.models.profile import Profile
from thriftmarket.utils.auth_utils import hash_password, check_password
from thriftmarket.utils.exceptions import AccountSuspended, ServiceError
from flask_jwt_extended import create_access_token, create_refresh_token
from datetime import timedelta
from flask import current_app

SELF_SERVICE_ROLES = ("buyer", "seller")

def register_user(email, password, full_name, role="buyer", store_name=None):
    if role not in SELF_SERVICE_ROLES:
        raise ServiceError(
            code="VALIDATION_ERROR",
            message=f"Could not register {role}",
            details={"field": "role"},
            status=422,
        )

    if Profile.query.filter_by(email=email).first():
        raise ServiceError(
            code="USER_EXISTS",
            message="User with that email already exists",
            details={"field": "email"},
            status=409,
        )

    user = Profile(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        role=role,
        store_name=store_name if role == "seller" else None,
    )
    db.session.add(user)
    db.session.commit()
    return user

def authenticate_user(email, password):
    user = Profile.query.filter_by(email=email).first()
    if not user or not check_password(password, user.password_hash):
        raise ServiceError(code="AUTH_FAILED", message="Invalid credentials", status=401)
    if user.is_suspended:
        raise AccountSuspended()
    return user

def generate_tokens_for_user(user):
    claims = {"role": user.role}
    access = create_access_token(
        identity=user.id,
        additional_claims=claims,
        expires_delta=timedelta(seconds=current_app.config.get("ACCESS_EXPIRES", 86400)),
    )
    refresh = create_refresh_token(
        identity=user.id,
        expires_delta=timedelta(seconds=current_app.config.get("REFRESH_EXPIRES", 86400)),
    )
    return access, refresh
