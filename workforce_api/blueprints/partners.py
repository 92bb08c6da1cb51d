from __future__ import annotations

from flask import Blueprint, request

from workforce_api.common.auth import requires_roles, current_principal
from workforce_api.common.errors import ValidationError
from workforce_api.common.http import ok, paged
from workforce_api.common.paging import page_limit, text_q
from workforce_api.common.validation import parse_id, clean_str
from workforce_api.models.partner import Partner
from workforce_api.services import partners as svc

bp = Blueprint("partners", __name__, url_prefix="/api/v1/partners")


def _row(x: Partner):
    return {
        "id": x.id,
        "user_id": x.user_id,
        "email": x.user.email if x.user else None,
        "company_name": x.company_name,
        "company_details": x.company_details,
        "contact_person": x.contact_person,
        "contact_phone": x.contact_phone,
        "employee_count": x.employees.count(),
        "created_by": x.created_by,
        "created_at": x.created_at.isoformat() if x.created_at else None,
    }


def _json():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("JSON body required")
    return data


@bp.get("")
@requires_roles("admin")
def list_partners():
    page, limit = page_limit()
    rows, total = svc.list_partners(current_principal(), text_q(), page, limit)
    return paged([_row(p) for p in rows], page, limit, total)


@bp.get("/<pid>")
@requires_roles("admin")
def get_partner(pid):
    return ok(_row(svc.get_partner(current_principal(), parse_id(pid, "partner"))))


@bp.post("")
@requires_roles("admin")
def create_partner():
    data = _json()
    body = {
        "email": clean_str(data.get("email"), "email", required=True, max_len=255),
        "password": data.get("password") or "",
        "full_name": clean_str(data.get("full_name"), "full_name", max_len=255),
        "company_name": clean_str(data.get("company_name"), "company_name", required=True, max_len=255),
        "company_details": clean_str(data.get("company_details"), "company_details", required=True),
        "contact_person": clean_str(data.get("contact_person"), "contact_person", max_len=120),
        "contact_phone": clean_str(data.get("contact_phone"), "contact_phone", max_len=40),
    }
    p = svc.create_partner(current_principal(), body)
    return ok(_row(p), status=201)


@bp.patch("/<pid>")
@requires_roles("admin")
def update_partner(pid):
    data = _json()
    limits = {"company_name": 255, "company_details": None, "contact_person": 120, "contact_phone": 40}
    changes = {k: clean_str(data.get(k), k, max_len=n) for k, n in limits.items() if k in data}
    p = svc.update_partner(current_principal(), parse_id(pid, "partner"), changes)
    return ok(_row(p))


@bp.delete("/<pid>")
@requires_roles("admin")
def delete_partner(pid):
    svc.delete_partner(current_principal(), parse_id(pid, "partner"))
    return ok({"message": "Partner deleted"})
