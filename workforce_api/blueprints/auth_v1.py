from flask import Blueprint, current_app, request
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    jwt_required, get_jwt_identity
)
from workforce_api.common.errors import NotFoundError, UnauthenticatedError
from workforce_api.common.http import ok
from workforce_api.models.user import User
from workforce_api.extensions import db

bp = Blueprint("auth_v1", __name__, url_prefix="/api/v1/auth")

def _user_payload(u: User):
    return {
        "id": u.id,
        "email": u.email,
        "full_name": u.full_name,
        "role": u.role,
        "partner_id": u.partner_id if u.role == "partner" else None,
    }

def _claims(u: User):
    return {"role": u.role, "email": u.email}

@bp.post("/login")
def login():
    data = request.get_json(silent=True, force=True)
    if not isinstance(data, dict):
        data = {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    u = User.query.filter_by(email=email).first()
    if not u or not u.check_password(password):
        current_app.logger.warning("login failed email=%s", email)
        raise UnauthenticatedError("Invalid credentials")
    if u.status != "active":
        raise UnauthenticatedError("Account disabled")

    access  = create_access_token(identity=str(u.id), additional_claims=_claims(u))
    refresh = create_refresh_token(identity=str(u.id), additional_claims={"role": u.role})
    return ok({"access": access, "refresh": refresh, "user": _user_payload(u)})

@bp.post("/refresh")
@jwt_required(refresh=True)
def refresh():
    uid = get_jwt_identity()
    u = db.session.get(User, int(uid)) if uid else None
    if not u:
        raise UnauthenticatedError("User not found")
    new_access = create_access_token(identity=str(u.id), additional_claims=_claims(u))
    return ok({"access": new_access})

@bp.get("/me")
@jwt_required()
def me():
    uid = get_jwt_identity()
    u = db.session.get(User, int(uid)) if uid else None
    if not u:
        raise NotFoundError("User not found")
    return ok(_user_payload(u))
