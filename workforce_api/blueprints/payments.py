from __future__ import annotations

from flask import Blueprint, request

from workforce_api.common.auth import requires_roles, current_principal
from workforce_api.common.errors import ValidationError
from workforce_api.common.http import ok, paged
from workforce_api.common.paging import page_limit
from workforce_api.common.validation import (
    parse_id, parse_id_list, parse_date, parse_amount, parse_bool, parse_url, clean_str,
)
from workforce_api.models.payment import Payment
from workforce_api.services import aggregation, batch, payments as svc
from workforce_api.services.scope import resolve_scope

bp = Blueprint("payments", __name__, url_prefix="/api/v1/payments")


def _row(p: Payment):
    emp = p.employee
    return {
        "id": p.id,
        "employee_id": p.employee_id,
        "employee_name": emp.name if emp else None,
        "employee_code": emp.code if emp else None,
        "level_name": emp.level.level_name if emp and emp.level else None,
        "provider": emp.provider_kind if emp else None,
        "partner_id": emp.partner_id if emp else None,
        "amount": float(p.amount) if p.amount is not None else None,
        "due_date": p.due_date.isoformat() if p.due_date else None,
        "paid_date": p.paid_date.isoformat() if p.paid_date else None,
        "status": p.status,
        "paid_by": p.paid_by,
        "paid_by_name": p.payer.full_name if p.payer else None,
        "proof_url": p.proof_url,
        "notes": p.notes,
        "created_at": p.created_at.isoformat() if p.created_at else None,
        "updated_at": p.updated_at.isoformat() if p.updated_at else None,
    }


def _json():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _int_arg(name: str):
    v = (request.args.get(name) or "").strip()
    if not v:
        return None
    try:
        return int(v)
    except ValueError:
        raise ValidationError(f"{name} must be integer")


def _filters() -> svc.PaymentFilters:
    partner = (request.args.get("partner_id") or "").strip() or None
    if partner and partner != "house":
        partner = parse_id(partner, "partner")
    emp = request.args.get("employee_id")
    return svc.PaymentFilters(
        status=(request.args.get("status") or "").strip().lower() or None,
        employee_id=parse_id(emp, "employee") if emp else None,
        partner=partner,
        start_date=parse_date(request.args.get("start_date"), "start_date"),
        end_date=parse_date(request.args.get("end_date"), "end_date"),
        month=_int_arg("month"),
        year=_int_arg("year"),
    )


# ---------- reads ----------
@bp.get("")
@requires_roles()
def list_payments():
    page, limit = page_limit()
    rows, total = svc.list_payments(current_principal(), _filters(), page, limit)
    return paged([_row(p) for p in rows], page, limit, total)


@bp.get("/summary")
@requires_roles()
def summary():
    q = svc.payment_query(resolve_scope(current_principal()), _filters())
    return ok({
        "summary": aggregation.payment_summary(q),
        "calendar": aggregation.due_date_buckets(q),
    })


@bp.get("/<pid>")
@requires_roles()
def get_payment(pid):
    p = svc.get_payment(current_principal(), parse_id(pid, "payment"))
    return ok(_row(p))


# ---------- writes ----------
@bp.post("")
@requires_roles("admin")
def create_payment():
    data = _json()
    if not data.get("employee_id"):
        raise ValidationError("employee_id is required")
    p = svc.create_payment(
        current_principal(),
        employee_id=parse_id(data.get("employee_id"), "employee"),
        due_date=parse_date(data.get("due_date"), "due_date", required=True),
        amount=parse_amount(data.get("amount")),
        notes=clean_str(data.get("notes"), "notes"),
    )
    return ok(_row(p), status=201)


@bp.patch("/<pid>")
@requires_roles("admin")
def update_payment(pid):
    data = _json()
    kw = {}
    if "amount" in data:
        kw["amount"] = parse_amount(data.get("amount"), required=True)
    if "due_date" in data:
        kw["due_date"] = parse_date(data.get("due_date"), "due_date", required=True)
    if "notes" in data:
        kw["notes"] = clean_str(data.get("notes"), "notes")
    if "status" in data:
        raise ValidationError("status can only change through mark-paid or approve")
    p = svc.update_payment(current_principal(), parse_id(pid, "payment"), **kw)
    return ok(_row(p))


@bp.delete("/<pid>")
@requires_roles("admin")
def delete_payment(pid):
    svc.delete_payment(current_principal(), parse_id(pid, "payment"))
    return ok({"message": "Payment deleted"})


@bp.post("/<pid>/mark-paid")
@requires_roles()
def mark_paid(pid):
    data = _json()
    p = svc.mark_paid(
        current_principal(), parse_id(pid, "payment"),
        proof_url=parse_url(data.get("proof_url")),
        notes=clean_str(data.get("notes"), "notes"),
    )
    return ok(_row(p))


@bp.post("/<pid>/approve")
@requires_roles("admin")
def approve(pid):
    data = _json()
    if "approved" not in data:
        raise ValidationError("approved is required")
    p = svc.review_payment(current_principal(), parse_id(pid, "payment"), parse_bool(data["approved"], "approved"))
    return ok(_row(p))


# ---------- batch ----------
@bp.post("/batch")
@requires_roles("admin")
def batch_create():
    data = _json()
    res = batch.batch_create_payments(
        current_principal(),
        parse_id_list(data.get("employee_ids"), "employee"),
        parse_date(data.get("due_date"), "due_date", required=True),
        notes=clean_str(data.get("notes"), "notes"),
    )
    return ok({
        "count": res.count,
        "payments": [_row(p) for p in res.created],
        "skipped_employee_ids": res.skipped_ids,
    }, status=201)


@bp.post("/batch/mark-paid")
@requires_roles()
def batch_mark_paid():
    data = _json()
    n = batch.batch_mark_paid(
        current_principal(),
        parse_id_list(data.get("payment_ids"), "payment"),
        proof_url=parse_url(data.get("proof_url")),
    )
    return ok({"count": n})
