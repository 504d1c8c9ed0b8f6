from flask_jwt_extended import get_jwt_identity
from thriftmarket.extensions import bcrypt, db
from thriftmarket.models.profile import Profile
from thriftmarket.utils.exceptions import AccountSuspended, ForbiddenError, NotFoundError

def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode("utf-8")

def check_password(password, hashed_password):
    return bcrypt.check_password_hash(hashed_password, password)

def load_profile(user_id):
    """Session resume: resolve the profile and refuse suspended accounts."""
    user = db.session.get(Profile, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.is_suspended:
        raise AccountSuspended()
    return user

def current_user(*roles):
    user = load_profile(get_jwt_identity())
    if roles and user.role not in roles:
        raise ForbiddenError(f"Only {' or '.join(roles)} accounts can do this")
    return user
