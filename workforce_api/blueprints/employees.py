from __future__ import annotations

from flask import Blueprint, request

from workforce_api.common.auth import requires_roles, current_principal
from workforce_api.common.errors import ValidationError
from workforce_api.common.http import ok, paged
from workforce_api.common.paging import page_limit, text_q
from workforce_api.common.validation import parse_id, parse_amount, parse_bool, parse_url, clean_str
from workforce_api.models.employee import Employee
from workforce_api.services import employees as svc

bp = Blueprint("employees", __name__, url_prefix="/api/v1/employees")

# ---------- helpers ----------
def _row(x: Employee):
    return {
        "id": x.id,
        "code": x.code,
        "name": x.name,
        "nid": x.nid,
        "photo": x.photo,
        "details": x.details,
        "salary": float(x.salary) if x.salary is not None else None,
        "level_id": x.level_id,
        "level_name": x.level.level_name if x.level else None,
        "provider": x.provider_kind,
        "partner_id": x.partner_id,
        "partner_name": x.partner.company_name if x.partner else None,
        "approval_status": x.approval_status,
        "created_at": x.created_at.isoformat() if x.created_at else None,
        "updated_at": x.updated_at.isoformat() if x.updated_at else None,
    }

def _json():
    data = request.get_json(silent=True)
    return data

def _fields(data: dict, partial: bool = False) -> dict:
    """Normalise an incoming employee body. With partial=True only present keys are returned."""
    out = {}
    if not partial or "code" in data:
        out["code"] = clean_str(data.get("code"), "code", required=not partial, max_len=64)
    if not partial or "name" in data:
        out["name"] = clean_str(data.get("name"), "name", required=not partial, max_len=255)
    if not partial or "nid" in data:
        out["nid"] = clean_str(data.get("nid"), "nid", required=not partial, max_len=64)
    if not partial or "salary" in data:
        out["salary"] = parse_amount(data.get("salary"), "salary", required=not partial)
    if not partial or "photo" in data:
        out["photo"] = parse_url(data.get("photo"), "photo")
    if not partial or "level_id" in data:
        raw = data.get("level_id")
        out["level_id"] = parse_id(raw, "level") if raw not in (None, "") else None
    if not partial or "details" in data:
        details = data.get("details")
        if details is not None and not isinstance(details, dict):
            raise ValidationError("details must be an object")
        out["details"] = details
    return out

# ---------- routes ----------
@bp.get("")
@requires_roles()
def list_employees():
    provider = (request.args.get("provider") or "").strip() or None
    if provider and provider != "house":
        provider = parse_id(provider, "partner")
    status = (request.args.get("status") or "").strip().lower() or None
    level = (request.args.get("level") or request.args.get("level_id") or "").strip() or None
    filters = svc.EmployeeFilters(
        provider=provider,
        status=status,
        min_salary=parse_amount(request.args.get("min_salary"), "min_salary"),
        max_salary=parse_amount(request.args.get("max_salary"), "max_salary"),
        level_id=parse_id(level, "level") if level else None,
        q=text_q(),
    )
    page, limit = page_limit()
    rows, total = svc.list_employees(current_principal(), filters, page, limit)
    return paged([_row(e) for e in rows], page, limit, total)

@bp.get("/<eid>")
@requires_roles()
def get_employee(eid):
    emp = svc.get_employee(current_principal(), parse_id(eid, "employee"))
    return ok(_row(emp))

@bp.post("")
@requires_roles()
def create_employee():
    data = _json()
    if not isinstance(data, dict):
        raise ValidationError("JSON body required")
    emp = svc.create_employee(current_principal(), _fields(data))
    return ok(_row(emp), status=201)

@bp.post("/batch")
@requires_roles()
def batch_create():
    data = _json()
    items = data.get("employees") if isinstance(data, dict) else data
    if not isinstance(items, list) or not items:
        raise ValidationError("employees must be a non-empty list")
    parsed = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"Row {i + 1}: must be an object")
        try:
            parsed.append(_fields(item))
        except ValidationError as e:
            raise ValidationError(f"Row {i + 1}: {e.message}")
    rows = svc.batch_create_employees(current_principal(), parsed)
    return ok([_row(e) for e in rows], status=201, count=len(rows))

@bp.patch("/<eid>")
@requires_roles()
def update_employee(eid):
    data = _json()
    if not isinstance(data, dict):
        raise ValidationError("JSON body required")
    changes = _fields(data, partial=True)
    emp = svc.update_employee(current_principal(), parse_id(eid, "employee"), changes)
    return ok(_row(emp))

@bp.delete("/<eid>")
@requires_roles("admin", "partner")
def delete_employee(eid):
    svc.delete_employee(current_principal(), parse_id(eid, "employee"))
    return ok({"message": "Employee deleted"})

@bp.post("/<eid>/approve")
@requires_roles("admin")
def approve_employee(eid):
    data = _json()
    if not isinstance(data, dict):
        data = {}
    approved = parse_bool(data.get("approved", True), "approved")
    emp = svc.set_approval(current_principal(), parse_id(eid, "employee"), approved)
    return ok(_row(emp))
