# workforce_api/services/lifecycle.py
"""
Status rules shared by the employee payment ledger and the partner settlement ledger.

    pending --mark-paid(admin)-------> completed
    pending --mark-paid(partner/staff)-> approved
    approved --approve--------------> completed
    approved --reject---------------> pending      (employee payments only)

Every transition is a single conditional UPDATE guarded on the current status,
so two concurrent callers cannot both pass the same guard.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from workforce_api.extensions import db
from workforce_api.common.errors import NotFoundError, ValidationError

PENDING = "pending"
APPROVED = "approved"
COMPLETED = "completed"
STATUSES = (PENDING, APPROVED, COMPLETED)


def mark_paid_target(role: str) -> str:
    # admin confirmation is authoritative; anyone else files a claim for countersigning
    return COMPLETED if role == "admin" else APPROVED


def mark_paid_values(principal, proof_url: Optional[str] = None, notes: Optional[str] = None) -> Dict[str, Any]:
    now = datetime.utcnow()
    values: Dict[str, Any] = {
        "status": mark_paid_target(principal.role),
        "paid_date": now,
        "paid_by": principal.id,
        "updated_at": now,
    }
    if proof_url:
        values["proof_url"] = proof_url
    if notes:
        values["notes"] = notes
    return values


def transition(model, record_id: int, expected: str, values: Dict[str, Any], label: str = "Payment"):
    """
    Apply `values` to the row iff it is currently in `expected` status.
    Returns the refreshed row; raises NotFound / Validation otherwise.
    """
    n = (model.query
         .filter(model.id == record_id, model.status == expected)
         .update(values, synchronize_session=False))
    if n != 1:
        db.session.rollback()
        row = db.session.get(model, record_id)
        if row is None:
            raise NotFoundError(f"{label} not found")
        raise ValidationError(
            f"{label} must be in {expected} status to {_verb(expected, values.get('status'))}",
            payload={"current_status": row.status, "required_status": expected},
        )
    db.session.commit()
    row = db.session.get(model, record_id)
    return row


def bulk_transition(model, ids: Iterable[int], expected: str, values: Dict[str, Any], *criteria) -> int:
    """Bulk variant: rows not matching the id set, the status guard or `criteria` are left alone."""
    ids = list(ids)
    if not ids:
        return 0
    q = model.query.filter(model.id.in_(ids), model.status == expected)
    for c in criteria:
        q = q.filter(c)
    n = q.update(values, synchronize_session=False)
    db.session.commit()
    return n


def _verb(expected: str, target: Optional[str]) -> str:
    if expected == APPROVED and target == COMPLETED:
        return "complete"
    if expected == APPROVED and target == PENDING:
        return "reject"
    if expected == PENDING:
        return "mark as paid"
    return "change status"
