# workforce_api/services/partner_payments.py
"""
Settlements owed by the admin to partner agencies.

Same status vocabulary as the employee ledger, but there is no reject path:
an attested settlement can only be countersigned.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from workforce_api.extensions import db
from workforce_api.common.errors import ForbiddenError, NotFoundError, ValidationError
from workforce_api.models.partner import Partner
from workforce_api.models.payment import PartnerPayment
from workforce_api.services import lifecycle
from workforce_api.services.scope import partner_for_user

log = logging.getLogger(__name__)

LABEL = "Partner payment"
_UNSET = object()


def _own_partner_id(principal) -> Optional[int]:
    """None for admin (no restriction); own partner id for partners; staff are refused."""
    if principal.role == "admin":
        return None
    if principal.role == "partner":
        return partner_for_user(principal.id).id
    raise ForbiddenError("Staff cannot access partner payments")


def _load(record_id: int) -> PartnerPayment:
    row = db.session.get(PartnerPayment, record_id)
    if row is None:
        raise NotFoundError(f"{LABEL} not found")
    return row


def list_partner_payments(principal, partner_id: Optional[int] = None, status: Optional[str] = None,
                          page: int = 1, limit: int = 20) -> Tuple[List[PartnerPayment], int]:
    own = _own_partner_id(principal)
    q = PartnerPayment.query
    if own is not None:
        q = q.filter(PartnerPayment.partner_id == own)
    if partner_id:
        q = q.filter(PartnerPayment.partner_id == partner_id)
    if status:
        if status not in lifecycle.STATUSES:
            raise ValidationError(f"status must be one of {', '.join(lifecycle.STATUSES)}")
        q = q.filter(PartnerPayment.status == status)

    total = q.count()
    rows = (q.order_by(PartnerPayment.due_date.desc(), PartnerPayment.id.desc())
             .offset((page - 1) * limit).limit(limit).all())
    return rows, total


def get_partner_payment(principal, record_id: int) -> PartnerPayment:
    own = _own_partner_id(principal)
    row = _load(record_id)
    if own is not None and row.partner_id != own:
        raise ForbiddenError("Forbidden")
    return row


def create_partner_payment(principal, partner_id: int, amount: Decimal, due_date: date,
                           notes: Optional[str] = None) -> PartnerPayment:
    if principal.role != "admin":
        raise ForbiddenError("Only admin can create partner payments")
    if amount is None or amount <= 0:
        raise ValidationError("amount must be positive")
    if due_date is None:
        raise ValidationError("due_date is required")
    if db.session.get(Partner, partner_id) is None:
        raise NotFoundError("Partner not found")

    row = PartnerPayment(partner_id=partner_id, amount=amount, due_date=due_date,
                         notes=notes, status=lifecycle.PENDING)
    db.session.add(row)
    db.session.commit()
    log.info("partner payment created id=%s partner=%s amount=%s", row.id, partner_id, amount)
    return row


def update_partner_payment(principal, record_id: int, amount=_UNSET, due_date=_UNSET, notes=_UNSET) -> PartnerPayment:
    if principal.role != "admin":
        raise ForbiddenError("Only admin can update partner payments")
    row = _load(record_id)
    if amount is not _UNSET:
        if amount is None or amount <= 0:
            raise ValidationError("amount must be positive")
        row.amount = amount
    if due_date is not _UNSET:
        if due_date is None:
            raise ValidationError("due_date is required")
        row.due_date = due_date
    if notes is not _UNSET:
        row.notes = notes
    db.session.commit()
    return row


def delete_partner_payment(principal, record_id: int) -> None:
    if principal.role != "admin":
        raise ForbiddenError("Only admin can delete partner payments")
    n = PartnerPayment.query.filter(PartnerPayment.id == record_id).delete(synchronize_session=False)
    if n == 0:
        raise NotFoundError(f"{LABEL} not found")
    db.session.commit()
    log.info("partner payment deleted id=%s by=%s", record_id, principal.id)


def mark_paid(principal, record_id: int, proof_url: Optional[str] = None,
              notes: Optional[str] = None) -> PartnerPayment:
    own = _own_partner_id(principal)
    row = _load(record_id)
    if own is not None and row.partner_id != own:
        log.warning("partner payment deny id=%s partner=%s", record_id, own)
        raise ForbiddenError("Forbidden: Not your payment")

    row = lifecycle.transition(
        PartnerPayment, row.id, lifecycle.PENDING,
        lifecycle.mark_paid_values(principal, proof_url, notes),
        label=LABEL,
    )
    log.info("partner payment marked paid id=%s by=%s -> %s", row.id, principal.id, row.status)
    return row


def approve(principal, record_id: int) -> PartnerPayment:
    if principal.role != "admin":
        raise ForbiddenError("Only admin can approve partner payments")
    row = lifecycle.transition(
        PartnerPayment, record_id, lifecycle.APPROVED,
        {"status": lifecycle.COMPLETED, "updated_at": datetime.utcnow()},
        label=LABEL,
    )
    log.info("partner payment approved id=%s by=%s", row.id, principal.id)
    return row
