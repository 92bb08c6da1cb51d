# workforce_api/services/scope.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, true

from workforce_api.common.errors import ForbiddenError, NotFoundError
from workforce_api.models.employee import Employee, House, PartnerProvider, HOUSE, PARTNER
from workforce_api.models.partner import Partner
from workforce_api.models.payment import Payment
from workforce_api.models.operations import Job, job_employees

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scope:
    """
    The slice of the directory a caller may read or act on.

      admin   -> everything
      partner -> employees provided by the caller's own Partner profile
      staff   -> house employees
    Always applied server-side before any client filter.
    """
    role: str
    partner_id: Optional[int] = None

    @property
    def unrestricted(self) -> bool:
        return self.role == "admin"

    def employee_criteria(self):
        if self.unrestricted:
            return true()
        if self.role == "partner":
            return (Employee.provider_kind == PARTNER) & (Employee.partner_id == self.partner_id)
        return Employee.provider_kind == HOUSE

    def employee_ids(self):
        return select(Employee.id).where(self.employee_criteria())

    def payment_criteria(self):
        if self.unrestricted:
            return true()
        return Payment.employee_id.in_(self.employee_ids())

    def job_criteria(self):
        """Jobs with at least one assigned employee inside the scope."""
        if self.unrestricted:
            return true()
        sub = (select(job_employees.c.job_id)
               .join(Employee, Employee.id == job_employees.c.employee_id)
               .where(self.employee_criteria()))
        return Job.id.in_(sub)

    def covers(self, employee: Employee) -> bool:
        if self.unrestricted:
            return True
        prov = employee.provider
        if self.role == "partner":
            return isinstance(prov, PartnerProvider) and prov.partner_id == self.partner_id
        return isinstance(prov, House)

    def ensure_covers(self, employee: Employee, message: str = "Forbidden: Not your employee"):
        if not self.covers(employee):
            log.warning("scope deny role=%s partner=%s employee=%s", self.role, self.partner_id, employee.id)
            raise ForbiddenError(message)


def partner_for_user(user_id: int) -> Partner:
    partner = Partner.query.filter_by(user_id=user_id).first()
    if partner is None:
        raise NotFoundError("Partner profile not found")
    return partner


def resolve_scope(principal) -> Scope:
    if principal.role == "admin":
        return Scope("admin")
    if principal.role == "partner":
        return Scope("partner", partner_for_user(principal.id).id)
    if principal.role == "staff":
        return Scope("staff")
    raise ForbiddenError(f"Unknown role '{principal.role}'")
