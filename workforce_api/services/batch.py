# workforce_api/services/batch.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from workforce_api.extensions import db
from workforce_api.common.errors import ForbiddenError, ValidationError
from workforce_api.models.employee import Employee
from workforce_api.models.payment import Payment
from workforce_api.services import lifecycle
from workforce_api.services.scope import resolve_scope

log = logging.getLogger(__name__)


@dataclass
class BatchCreateResult:
    created: List[Payment]
    skipped_ids: List[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.created)


def batch_create_payments(principal, employee_ids: Iterable[int], due_date: date,
                          notes: Optional[str] = None) -> BatchCreateResult:
    """
    One pending payment per approved employee, at the employee's current salary.
    Unapproved or unknown ids are skipped and reported; if nothing is left the
    whole batch is refused and nothing is written.
    """
    if principal.role != "admin":
        raise ForbiddenError("Only admin can create payments")
    if due_date is None:
        raise ValidationError("due_date is required")

    ids = list(dict.fromkeys(employee_ids))
    if not ids:
        raise ValidationError("At least one employee is required")

    scope = resolve_scope(principal)
    employees = (Employee.query
                 .filter(Employee.id.in_(ids),
                         Employee.approval_status == "approved",
                         scope.employee_criteria())
                 .order_by(Employee.id)
                 .all())
    if not employees:
        log.warning("batch create refused: no approved employees among %s", ids)
        raise ValidationError("No approved employees found")

    kept = {e.id for e in employees}
    rows = [
        Payment(employee_id=e.id, amount=e.salary, due_date=due_date,
                notes=notes, status=lifecycle.PENDING)
        for e in employees
    ]
    db.session.add_all(rows)
    db.session.commit()

    skipped = [i for i in ids if i not in kept]
    log.info("batch create: %d payments due=%s skipped=%s", len(rows), due_date, skipped)
    return BatchCreateResult(created=rows, skipped_ids=skipped)


def batch_mark_paid(principal, payment_ids: Iterable[int], proof_url: Optional[str] = None) -> int:
    """
    Mark every pending, in-scope payment among `payment_ids` as paid in one UPDATE.
    Returns the number of rows actually changed.
    """
    scope = resolve_scope(principal)
    ids = list(dict.fromkeys(payment_ids))
    n = lifecycle.bulk_transition(
        Payment, ids, lifecycle.PENDING,
        lifecycle.mark_paid_values(principal, proof_url),
        scope.payment_criteria(),
    )
    log.info("batch mark-paid by=%s role=%s requested=%d modified=%d",
             principal.id, principal.role, len(ids), n)
    return n
