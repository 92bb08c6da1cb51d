# workforce_api/services/employees.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import exists, or_

from workforce_api.extensions import db
from workforce_api.common.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from workforce_api.models.employee import Employee, House, PartnerProvider, HOUSE, PARTNER, APPROVAL_STATUSES
from workforce_api.models.operations import job_employees
from workforce_api.models.payment import Payment
from workforce_api.services.levels import get_level_or_404
from workforce_api.services.scope import resolve_scope

log = logging.getLogger(__name__)

_UNSET = object()
EDITABLE = ("name", "nid", "salary", "photo", "details", "level_id")


@dataclass
class EmployeeFilters:
    provider: Optional[Union[int, str]] = None   # "house" or a partner id
    status: Optional[str] = None
    min_salary: Optional[Decimal] = None
    max_salary: Optional[Decimal] = None
    level_id: Optional[int] = None
    q: Optional[str] = None


def _load(employee_id: int) -> Employee:
    emp = db.session.get(Employee, employee_id)
    if emp is None:
        raise NotFoundError("Employee not found")
    return emp


def _check_fields(data: Dict[str, Any]) -> None:
    for f in ("code", "name", "nid"):
        if not data.get(f):
            raise ValidationError(f"{f} is required")
    salary = data.get("salary")
    if salary is None or salary <= 0:
        raise ValidationError("salary must be positive")
    if data.get("level_id") is not None:
        get_level_or_404(data["level_id"])


def _provenance(principal, scope) -> Tuple[Any, str]:
    """New employees: admin/staff supply house staff (approved); partners supply their own (pending)."""
    if principal.role == "partner":
        return PartnerProvider(scope.partner_id), "pending"
    return House(), "approved"


# ---------- reads ----------
def list_employees(principal, filters: Optional[EmployeeFilters] = None,
                   page: int = 1, limit: int = 20) -> Tuple[List[Employee], int]:
    scope = resolve_scope(principal)
    f = filters or EmployeeFilters()
    q = Employee.query.filter(scope.employee_criteria())

    if f.provider is not None:
        if f.provider == HOUSE:
            q = q.filter(Employee.provider_kind == HOUSE)
        else:
            q = q.filter(Employee.provider_kind == PARTNER, Employee.partner_id == int(f.provider))
    if f.status:
        if f.status not in APPROVAL_STATUSES:
            raise ValidationError(f"status must be one of {', '.join(APPROVAL_STATUSES)}")
        q = q.filter(Employee.approval_status == f.status)
    if f.min_salary is not None:
        q = q.filter(Employee.salary >= f.min_salary)
    if f.max_salary is not None:
        q = q.filter(Employee.salary <= f.max_salary)
    if f.level_id is not None:
        q = q.filter(Employee.level_id == f.level_id)
    if f.q:
        like = f"%{f.q}%"
        q = q.filter(or_(Employee.name.ilike(like), Employee.code.ilike(like), Employee.nid.ilike(like)))

    total = q.count()
    rows = q.order_by(Employee.created_at.desc(), Employee.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def get_employee(principal, employee_id: int) -> Employee:
    scope = resolve_scope(principal)
    emp = _load(employee_id)
    scope.ensure_covers(emp, "Forbidden")
    return emp


# ---------- writes ----------
def create_employee(principal, data: Dict[str, Any]) -> Employee:
    scope = resolve_scope(principal)
    _check_fields(data)
    if Employee.query.filter_by(code=data["code"]).first() is not None:
        raise ValidationError("Employee code already exists")

    provider, approval = _provenance(principal, scope)
    emp = Employee(
        code=data["code"], name=data["name"], nid=data["nid"],
        salary=data["salary"], photo=data.get("photo"), details=data.get("details"),
        level_id=data.get("level_id"),
        approval_status=approval,
    )
    emp.provider = provider
    db.session.add(emp)
    db.session.commit()
    log.info("employee created id=%s code=%s provider=%s by=%s", emp.id, emp.code, emp.provider_kind, principal.id)
    return emp


def batch_create_employees(principal, items: List[Dict[str, Any]]) -> List[Employee]:
    """All or nothing: any invalid row or duplicate code refuses the whole set."""
    scope = resolve_scope(principal)
    if not items:
        raise ValidationError("At least one employee is required")

    codes = []
    for i, data in enumerate(items):
        try:
            _check_fields(data)
        except ValidationError as e:
            raise ValidationError(f"Row {i + 1}: {e.message}")
        codes.append(data["code"])

    dup_in_batch = sorted({c for c in codes if codes.count(c) > 1})
    taken = [c for (c,) in db.session.query(Employee.code).filter(Employee.code.in_(codes)).all()]
    duplicates = sorted(set(dup_in_batch) | set(taken))
    if duplicates:
        raise ValidationError("Duplicate employee codes", payload={"duplicates": duplicates})

    provider, approval = _provenance(principal, scope)
    rows = []
    for data in items:
        emp = Employee(
            code=data["code"], name=data["name"], nid=data["nid"],
            salary=data["salary"], photo=data.get("photo"), details=data.get("details"),
            level_id=data.get("level_id"),
            approval_status=approval,
        )
        emp.provider = provider
        rows.append(emp)
    db.session.add_all(rows)
    db.session.commit()
    log.info("employee batch created n=%d by=%s", len(rows), principal.id)
    return rows


def update_employee(principal, employee_id: int, changes: Dict[str, Any]) -> Employee:
    """Code and provenance are fixed; salary edits never touch existing payments."""
    scope = resolve_scope(principal)
    emp = _load(employee_id)
    scope.ensure_covers(emp)

    if "code" in changes and changes["code"] != emp.code:
        raise ValidationError("Employee code cannot be changed")
    for field in EDITABLE:
        if field not in changes:
            continue
        val = changes[field]
        if field in ("name", "nid") and not val:
            raise ValidationError(f"{field} is required")
        if field == "salary" and (val is None or val <= 0):
            raise ValidationError("salary must be positive")
        if field == "level_id" and val is not None:
            get_level_or_404(val)
        setattr(emp, field, val)
    db.session.commit()
    return emp


def delete_employee(principal, employee_id: int) -> None:
    if principal.role == "staff":
        raise ForbiddenError("Staff cannot delete employees")
    scope = resolve_scope(principal)
    emp = _load(employee_id)
    scope.ensure_covers(emp)

    has_payments = db.session.query(exists().where(Payment.employee_id == emp.id)).scalar()
    on_jobs = db.session.query(exists().where(job_employees.c.employee_id == emp.id)).scalar()
    if has_payments or on_jobs:
        log.warning("employee delete refused id=%s payments=%s jobs=%s", emp.id, has_payments, on_jobs)
        raise ConflictError("Employee has payments or job assignments")

    db.session.delete(emp)
    db.session.commit()
    log.info("employee deleted id=%s by=%s", employee_id, principal.id)


def set_approval(principal, employee_id: int, approved: bool) -> Employee:
    if principal.role != "admin":
        raise ForbiddenError("Only admin can approve employees")
    emp = _load(employee_id)
    if emp.provider_kind == HOUSE:
        raise ValidationError("House employees are always approved")
    emp.approval_status = "approved" if approved else "pending"
    db.session.commit()
    log.info("employee %s id=%s by=%s", "approved" if approved else "revoked", emp.id, principal.id)
    return emp
