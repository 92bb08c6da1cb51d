# workforce_api/common/auth.py
from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import current_app, g
from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity

from workforce_api.common.http import fail
from workforce_api.extensions import db, jwt
from workforce_api.models.user import User, ROLES

ADMIN, PARTNER, STAFF = "admin", "partner", "staff"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as handed to the services: who, and in which role."""
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


# ---------- helpers ----------

def _resolve_principal() -> Principal | None:
    """
    Role comes from the JWT 'role' claim (issued at login).
    Falls back to the user row when the claim is missing.
    """
    uid = get_jwt_identity()
    try:
        user_id = int(uid) if uid is not None else None
    except (TypeError, ValueError):
        return None
    if not user_id:
        return None

    claims = get_jwt() or {}
    role = claims.get("role")
    if role not in ROLES:
        user = db.session.get(User, user_id)
        if not user:
            return None
        role = user.role
    return Principal(id=user_id, role=role)


def current_principal() -> Principal:
    return g.principal


# ---------- decorators ----------

def requires_roles(*codes: str):
    """
    Require an authenticated caller holding AT LEAST ONE of the given roles.
    - No codes: any authenticated role passes.
    - 'admin' always passes.
    The resolved Principal is stored on flask.g for the handler.
    """
    def outer(fn):
        @wraps(fn)
        @jwt_required()
        def inner(*args, **kwargs):
            p = _resolve_principal()
            if p is None:
                return fail("Unauthorized", status=401, code="UNAUTHENTICATED")
            g.principal = p

            if p.is_admin or not codes or p.role in codes:
                return fn(*args, **kwargs)

            current_app.logger.warning(
                "role deny user=%s role=%s needs=%s", p.id, p.role, ",".join(codes)
            )
            return fail("Forbidden", status=403, code="FORBIDDEN")
        return inner
    return outer


# ---------- JWT error envelopes ----------

@jwt.unauthorized_loader
def _missing_token(reason: str):
    return fail("Unauthorized", status=401, code="UNAUTHENTICATED", detail=reason)

@jwt.invalid_token_loader
def _invalid_token(reason: str):
    return fail("Unauthorized", status=401, code="UNAUTHENTICATED", detail=reason)

@jwt.expired_token_loader
def _expired_token(_header, _payload):
    return fail("Token expired", status=401, code="UNAUTHENTICATED")
