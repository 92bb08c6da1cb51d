from __future__ import annotations

from flask import Blueprint, request

from workforce_api.common.auth import requires_roles, current_principal
from workforce_api.common.errors import ValidationError
from workforce_api.common.http import ok
from workforce_api.models.operations import Job
from workforce_api.services import aggregation
from workforce_api.blueprints.employees import _row as _employee_row
from workforce_api.blueprints.payments import _row as _payment_row

bp = Blueprint("dashboard", __name__, url_prefix="/api/v1/dashboard")

MAX_MONTHS = 24


def _job_row(j: Job):
    return {
        "id": j.id,
        "route_id": j.route_id,
        "route_name": j.route.name if j.route else None,
        "status": j.status,
        "employee_count": len(j.employees),
        "created_at": j.created_at.isoformat() if j.created_at else None,
    }


@bp.get("/stats")
@requires_roles()
def stats():
    raw = request.args.get("months", "6")
    try:
        months = int(raw)
    except ValueError:
        raise ValidationError("months must be integer")
    if not 1 <= months <= MAX_MONTHS:
        raise ValidationError(f"months must be between 1 and {MAX_MONTHS}")

    data = aggregation.dashboard(current_principal(), months)
    recent = data["recent"]
    data["recent"] = {
        "employees": [_employee_row(e) for e in recent["employees"]],
        "jobs": [_job_row(j) for j in recent["jobs"]],
        "payments": [_payment_row(p) for p in recent["payments"]],
    }
    return ok(data)
