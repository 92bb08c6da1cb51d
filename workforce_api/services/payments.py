# workforce_api/services/payments.py
"""
Employee payment ledger: creation, scoped reads, field edits and the
mark-paid / approve / reject transitions.
"""
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from sqlalchemy import select

from workforce_api.extensions import db
from workforce_api.common.errors import ForbiddenError, NotFoundError, ValidationError
from workforce_api.models.employee import Employee, HOUSE, PARTNER
from workforce_api.models.payment import Payment
from workforce_api.services import lifecycle
from workforce_api.services.scope import Scope, resolve_scope

log = logging.getLogger(__name__)

_UNSET = object()


@dataclass
class PaymentFilters:
    status: Optional[str] = None
    employee_id: Optional[int] = None
    partner: Optional[Union[int, str]] = None     # partner id, or "house"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    month: Optional[int] = None
    year: Optional[int] = None

    def date_window(self) -> Tuple[Optional[date], Optional[date]]:
        # month+year wins over an explicit range
        if self.month and self.year:
            if not 1 <= self.month <= 12:
                raise ValidationError("month must be 1-12")
            if not MINYEAR <= self.year <= MAXYEAR:
                raise ValidationError(f"year must be {MINYEAR}-{MAXYEAR}")
            last = calendar.monthrange(self.year, self.month)[1]
            return date(self.year, self.month, 1), date(self.year, self.month, last)
        return self.start_date, self.end_date


def _require_admin(principal, action: str):
    if principal.role != "admin":
        raise ForbiddenError(f"Only admin can {action}")


def _load(payment_id: int) -> Payment:
    p = db.session.get(Payment, payment_id)
    if p is None:
        raise NotFoundError("Payment not found")
    return p


# ---------- reads ----------
def payment_query(scope: Scope, filters: Optional[PaymentFilters] = None):
    """Scoped query; client filters can only narrow it."""
    f = filters or PaymentFilters()
    q = Payment.query.filter(scope.payment_criteria())

    if f.status:
        if f.status not in lifecycle.STATUSES:
            raise ValidationError(f"status must be one of {', '.join(lifecycle.STATUSES)}")
        q = q.filter(Payment.status == f.status)
    if f.employee_id:
        q = q.filter(Payment.employee_id == f.employee_id)
    if f.partner is not None:
        if f.partner == HOUSE:
            crit = Employee.provider_kind == HOUSE
        else:
            crit = (Employee.provider_kind == PARTNER) & (Employee.partner_id == int(f.partner))
        q = q.filter(Payment.employee_id.in_(select(Employee.id).where(crit)))

    start, end = f.date_window()
    if start:
        q = q.filter(Payment.due_date >= start)
    if end:
        q = q.filter(Payment.due_date <= end)
    return q


def list_payments(principal, filters: Optional[PaymentFilters] = None, page: int = 1, limit: int = 20) -> Tuple[List[Payment], int]:
    scope = resolve_scope(principal)
    q = payment_query(scope, filters)
    total = q.count()
    rows = (q.order_by(Payment.due_date.desc(), Payment.id.desc())
             .offset((page - 1) * limit).limit(limit).all())
    return rows, total


def get_payment(principal, payment_id: int) -> Payment:
    scope = resolve_scope(principal)
    p = _load(payment_id)
    scope.ensure_covers(p.employee, "Forbidden")
    return p


# ---------- writes ----------
def create_payment(principal, employee_id: int, due_date: date,
                   amount: Optional[Decimal] = None, notes: Optional[str] = None) -> Payment:
    _require_admin(principal, "create payments")
    if due_date is None:
        raise ValidationError("due_date is required")
    if amount is not None and amount <= 0:
        raise ValidationError("amount must be positive")

    emp = db.session.get(Employee, employee_id)
    if emp is None:
        raise NotFoundError("Employee not found")
    if not emp.is_approved:
        raise ValidationError("Employee must be approved first")

    p = Payment(
        employee_id=emp.id,
        amount=amount if amount is not None else emp.salary,
        due_date=due_date,
        notes=notes,
        status=lifecycle.PENDING,
    )
    db.session.add(p)
    db.session.commit()
    log.info("payment created id=%s employee=%s amount=%s due=%s", p.id, emp.id, p.amount, due_date)
    return p


def update_payment(principal, payment_id: int, amount=_UNSET, due_date=_UNSET, notes=_UNSET) -> Payment:
    """Edit amount / due_date / notes. Status is never touched here."""
    _require_admin(principal, "update payments")
    p = _load(payment_id)
    if amount is not _UNSET:
        if amount is None or amount <= 0:
            raise ValidationError("amount must be positive")
        p.amount = amount
    if due_date is not _UNSET:
        if due_date is None:
            raise ValidationError("due_date is required")
        p.due_date = due_date
    if notes is not _UNSET:
        p.notes = notes
    db.session.commit()
    return p


def delete_payment(principal, payment_id: int) -> None:
    _require_admin(principal, "delete payments")
    n = Payment.query.filter(Payment.id == payment_id).delete(synchronize_session=False)
    if n == 0:
        raise NotFoundError("Payment not found")
    db.session.commit()
    log.info("payment deleted id=%s by=%s", payment_id, principal.id)


def mark_paid(principal, payment_id: int, proof_url: Optional[str] = None, notes: Optional[str] = None) -> Payment:
    """
    pending -> completed when the admin pays; pending -> approved (awaiting the
    admin's countersignature) when a partner or staff member attests payment.
    """
    scope = resolve_scope(principal)
    p = _load(payment_id)
    if principal.role == "staff":
        scope.ensure_covers(p.employee, "Staff can only pay house employees")
    else:
        scope.ensure_covers(p.employee)

    row = lifecycle.transition(
        Payment, p.id, lifecycle.PENDING,
        lifecycle.mark_paid_values(principal, proof_url, notes),
    )
    log.info("payment marked paid id=%s by=%s role=%s -> %s", row.id, principal.id, principal.role, row.status)
    return row


def review_payment(principal, payment_id: int, approved: bool) -> Payment:
    """Admin countersignature: approved -> completed, or reject approved -> pending."""
    _require_admin(principal, "approve payments")
    target = lifecycle.COMPLETED if approved else lifecycle.PENDING
    row = lifecycle.transition(
        Payment, payment_id, lifecycle.APPROVED,
        {"status": target, "updated_at": datetime.utcnow()},
    )
    log.info("payment %s id=%s by=%s", "approved" if approved else "rejected", row.id, principal.id)
    return row
