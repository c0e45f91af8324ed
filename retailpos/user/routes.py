from flask import request
from werkzeug.security import generate_password_hash

from . import bp
from ..errors import ForbiddenError, PosError, ValidationError
from ..extensions import pos
from ..model import ROLES
from ..utils.api import ok
from ..utils.decorators import current_user, role_required


def _user_fields(data: dict, *, partial: bool, user_id: int | None = None) -> dict:
    fields = {}
    if "name" in data or not partial:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("name is required")
        fields["name"] = name
    if "email" in data or not partial:
        email = (data.get("email") or "").strip().lower()
        if not email or "@" not in email:
            raise ValidationError("a valid email is required")
        other = pos.users.by_email(email)
        if other and other.id != user_id:
            raise PosError("Email already registered", status_code=409)
        fields["email"] = email
    if "role" in data or not partial:
        role = (data.get("role") or "cashier").strip().lower()
        if role not in ROLES:
            raise ValidationError(f"role must be one of {', '.join(ROLES)}")
        fields["role"] = role
    if data.get("password") or not partial:
        password = data.get("password") or ""
        if len(password) < 6:
            raise ValidationError("Password required, min 6 chars")
        fields["password_hash"] = generate_password_hash(password)
    return fields


@bp.get("")
@role_required("admin", message="Only admins can manage users")
def list_users():
    return ok("users", {"items": [u.as_dict() for u in pos.users.all()]})


@bp.post("")
@role_required("admin", message="Only admins can manage users")
def create_user():
    data = request.get_json(silent=True) or {}
    u = pos.users.add(**_user_fields(data, partial=False))
    return ok("user created", u.as_dict(), status=201)


@bp.patch("/<int:user_id>")
@role_required("admin", message="Only admins can manage users")
def update_user(user_id: int):
    pos.users.require(user_id)
    data = request.get_json(silent=True) or {}
    u = pos.users.update(user_id, **_user_fields(data, partial=True, user_id=user_id))
    return ok("user updated", u.as_dict())


@bp.delete("/<int:user_id>")
@role_required("admin", message="Only admins can manage users")
def delete_user(user_id: int):
    if user_id == current_user().id:
        raise ForbiddenError("You cannot delete your own account.")
    pos.users.delete(user_id)
    pos.discard_working_order(user_id)
    return ok("user deleted", {"id": user_id})
