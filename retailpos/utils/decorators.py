# ------- retailpos/utils/decorators.py -------
from functools import wraps
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from ..errors import ForbiddenError, PosError
from ..extensions import pos
from ..model import User

def current_user() -> User:
    verify_jwt_in_request()
    uid = get_jwt_identity()
    try:
        uid = int(uid)
    except (TypeError, ValueError):
        uid = None
    user = pos.users.get(uid) if uid else None
    if not user:
        raise PosError("Unauthorized", status_code=401)
    return user

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        current_user()
        return fn(*args, **kwargs)
    return wrapper

def role_required(*roles, message: str | None = None):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            u = current_user()
            if u.role not in roles:
                raise ForbiddenError(message or "Forbidden")
            return fn(*args, **kwargs)
        return wrapper
    return decorator
