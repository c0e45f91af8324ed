from flask import request
from werkzeug.security import check_password_hash
from flask_jwt_extended import create_access_token

from . import bp
from ..extensions import pos
from ..utils.api import ok, err
from ..utils.decorators import current_user


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    if not email or not password:
        return err("Email and password are required", 400)
    user = pos.users.by_email(email)
    if not user or not check_password_hash(user.password_hash, password):
        return err("Invalid email or password", 401)

    access_token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
    return ok("You've logged in successfully", {
        "user": user.as_dict(),
        "user_logged_in": True,
        "token": access_token,
    })


@bp.post("/logout")
def logout():
    # the operator's working order does not outlive the session
    user = current_user()
    pos.discard_working_order(user.id)
    return ok("logged out")


@bp.get("/me")
def me():
    return ok("me", {"user": current_user().as_dict()})
