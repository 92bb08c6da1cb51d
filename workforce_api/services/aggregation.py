# workforce_api/services/aggregation.py
"""
Read-only rollups over the scoped ledger and directory.

Every function here starts from a query that already carries the caller's
scope, so a partner never sees totals that include anyone else's rows.
Empty inputs give zero-valued results.
"""
from __future__ import annotations

import calendar
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, select

from workforce_api.models.employee import Employee, HOUSE, PARTNER
from workforce_api.models.operations import Job, Route
from workforce_api.models.partner import Partner
from workforce_api.models.payment import Payment
from workforce_api.services import lifecycle
from workforce_api.services.payments import payment_query
from workforce_api.services.scope import Scope, resolve_scope

RECENT_LIMIT = 5


def _money(v) -> float:
    return float(v or Decimal("0"))


# ---------- ledger rollups ----------
def payment_summary(query) -> Dict[str, Any]:
    """
    Counts per status plus money owed (pending + approved) and paid (completed).
    `query` is a scoped Payment query.
    """
    rows = (query.with_entities(Payment.status,
                                func.count(Payment.id),
                                func.coalesce(func.sum(Payment.amount), 0))
                 .order_by(None)
                 .group_by(Payment.status)
                 .all())
    counts = {s: 0 for s in lifecycle.STATUSES}
    sums = {s: Decimal("0") for s in lifecycle.STATUSES}
    for status, n, total in rows:
        counts[status] = int(n)
        sums[status] = Decimal(str(total))

    return {
        "total": sum(counts.values()),
        "pending": counts[lifecycle.PENDING],
        "approved": counts[lifecycle.APPROVED],
        "completed": counts[lifecycle.COMPLETED],
        "owed_amount": _money(sums[lifecycle.PENDING] + sums[lifecycle.APPROVED]),
        "paid_amount": _money(sums[lifecycle.COMPLETED]),
    }


def due_date_buckets(query) -> List[Dict[str, Any]]:
    """One entry per distinct due date, ascending; drives the calendar view."""
    pending_n = func.sum(case((Payment.status == lifecycle.PENDING, 1), else_=0))
    rows = (query.with_entities(Payment.due_date,
                                func.count(Payment.id),
                                func.coalesce(func.sum(Payment.amount), 0),
                                pending_n)
                 .order_by(None)
                 .group_by(Payment.due_date)
                 .order_by(Payment.due_date.asc())
                 .all())
    out = []
    for d, n, total, pending in rows:
        pending = int(pending or 0)
        out.append({
            "date": d.isoformat(),
            "count": int(n),
            "total_amount": _money(total),
            "pending_count": pending,
            "has_pending": pending > 0,
        })
    return out


# ---------- time series ----------
def _month_starts(months: int, today: date) -> List[date]:
    y, m = today.year, today.month
    starts = []
    for _ in range(months):
        starts.append(date(y, m, 1))
        m -= 1
        if m == 0:
            y, m = y - 1, 12
    return list(reversed(starts))


def _next_month(d: date) -> date:
    return date(d.year + 1, 1, 1) if d.month == 12 else date(d.year, d.month + 1, 1)


def monthly_series(scope: Scope, months: int = 6, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Rolling window of `months` calendar months ending with the current one,
    oldest first: new employees, new jobs and completed payments per month.
    """
    if months < 1:
        return []
    today = today or date.today()

    out = []
    for start in _month_starts(months, today):
        lo = datetime.combine(start, datetime.min.time())
        hi = datetime.combine(_next_month(start), datetime.min.time())

        employees = (Employee.query
                     .filter(scope.employee_criteria(),
                             Employee.created_at >= lo, Employee.created_at < hi)
                     .count())
        jobs = (Job.query
                .filter(scope.job_criteria(), Job.created_at >= lo, Job.created_at < hi)
                .count())
        payments = (Payment.query
                    .filter(scope.payment_criteria(),
                            Payment.status == lifecycle.COMPLETED,
                            Payment.paid_date >= lo, Payment.paid_date < hi)
                    .count())

        out.append({
            "month": start.strftime("%Y-%m"),
            "name": calendar.month_abbr[start.month],
            "employees": employees,
            "jobs": jobs,
            "payments": payments,
        })
    return out


# ---------- dashboard ----------
def dashboard(principal, months: int = 6, today: Optional[date] = None) -> Dict[str, Any]:
    scope = resolve_scope(principal)

    emp_q = Employee.query.filter(scope.employee_criteria())
    job_q = Job.query.filter(scope.job_criteria())

    if scope.unrestricted:
        total_routes = Route.query.count()
    else:
        total_routes = (Route.query
                        .filter(Route.id.in_(select(Job.route_id).where(scope.job_criteria())))
                        .count())

    stats: Dict[str, Any] = {
        "total_employees": emp_q.count(),
        "house_employees": emp_q.filter(Employee.provider_kind == HOUSE).count(),
        "partner_employees": emp_q.filter(Employee.provider_kind == PARTNER).count(),
        "pending_approvals": emp_q.filter(Employee.approval_status == "pending").count(),
        "total_routes": total_routes,
        "total_jobs": job_q.count(),
        "active_jobs": job_q.filter(Job.status == "active").count(),
        "payments": payment_summary(payment_query(scope)),
    }
    if scope.unrestricted:
        stats["total_partners"] = Partner.query.count()

    recent = {
        "employees": emp_q.order_by(Employee.created_at.desc(), Employee.id.desc()).limit(RECENT_LIMIT).all(),
        "jobs": job_q.order_by(Job.created_at.desc(), Job.id.desc()).limit(RECENT_LIMIT).all(),
        "payments": (payment_query(scope)
                     .order_by(Payment.created_at.desc(), Payment.id.desc())
                     .limit(RECENT_LIMIT).all()),
    }

    return {
        "stats": stats,
        "chart": monthly_series(scope, months, today),
        "recent": recent,
    }
