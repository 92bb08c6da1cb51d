from __future__ import annotations

from flask import Blueprint, request

from workforce_api.common.auth import requires_roles, current_principal
from workforce_api.common.errors import ValidationError
from workforce_api.common.http import ok, paged
from workforce_api.common.paging import page_limit
from workforce_api.common.validation import parse_id, parse_date, parse_amount, parse_url, clean_str
from workforce_api.models.payment import PartnerPayment
from workforce_api.services import partner_payments as svc

bp = Blueprint("partner_payments", __name__, url_prefix="/api/v1/partner-payments")


def _row(p: PartnerPayment):
    return {
        "id": p.id,
        "partner_id": p.partner_id,
        "company_name": p.partner.company_name if p.partner else None,
        "amount": float(p.amount) if p.amount is not None else None,
        "due_date": p.due_date.isoformat() if p.due_date else None,
        "paid_date": p.paid_date.isoformat() if p.paid_date else None,
        "status": p.status,
        "paid_by": p.paid_by,
        "proof_url": p.proof_url,
        "notes": p.notes,
        "created_at": p.created_at.isoformat() if p.created_at else None,
        "updated_at": p.updated_at.isoformat() if p.updated_at else None,
    }


def _json():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.get("")
@requires_roles("partner")
def list_partner_payments():
    page, limit = page_limit()
    raw_partner = request.args.get("partner_id")
    rows, total = svc.list_partner_payments(
        current_principal(),
        partner_id=parse_id(raw_partner, "partner") if raw_partner else None,
        status=(request.args.get("status") or "").strip().lower() or None,
        page=page, limit=limit,
    )
    return paged([_row(p) for p in rows], page, limit, total)


@bp.get("/<pid>")
@requires_roles("partner")
def get_partner_payment(pid):
    p = svc.get_partner_payment(current_principal(), parse_id(pid, "partner payment"))
    return ok(_row(p))


@bp.post("")
@requires_roles("admin")
def create_partner_payment():
    data = _json()
    if not data.get("partner_id"):
        raise ValidationError("partner_id is required")
    p = svc.create_partner_payment(
        current_principal(),
        partner_id=parse_id(data.get("partner_id"), "partner"),
        amount=parse_amount(data.get("amount"), required=True),
        due_date=parse_date(data.get("due_date"), "due_date", required=True),
        notes=clean_str(data.get("notes"), "notes"),
    )
    return ok(_row(p), status=201)


@bp.patch("/<pid>")
@requires_roles("admin")
def update_partner_payment(pid):
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
    p = svc.update_partner_payment(current_principal(), parse_id(pid, "partner payment"), **kw)
    return ok(_row(p))


@bp.delete("/<pid>")
@requires_roles("admin")
def delete_partner_payment(pid):
    svc.delete_partner_payment(current_principal(), parse_id(pid, "partner payment"))
    return ok({"message": "Partner payment deleted"})


@bp.post("/<pid>/mark-paid")
@requires_roles("partner")
def mark_paid(pid):
    data = _json()
    p = svc.mark_paid(
        current_principal(), parse_id(pid, "partner payment"),
        proof_url=parse_url(data.get("proof_url")),
        notes=clean_str(data.get("notes"), "notes"),
    )
    return ok(_row(p))


@bp.post("/<pid>/approve")
@requires_roles("admin")
def approve(pid):
    p = svc.approve(current_principal(), parse_id(pid, "partner payment"))
    return ok(_row(p))
