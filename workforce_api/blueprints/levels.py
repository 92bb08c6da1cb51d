from __future__ import annotations

from flask import Blueprint, request

from workforce_api.common.auth import requires_roles, current_principal
from workforce_api.common.http import ok, paged
from workforce_api.common.paging import page_limit
from workforce_api.common.validation import parse_id, parse_amount, clean_str
from workforce_api.models.level import Level
from workforce_api.services import levels as svc

bp = Blueprint("levels", __name__, url_prefix="/api/v1/levels")


def _row(x: Level):
    return {
        "id": x.id,
        "level_name": x.level_name,
        "base_salary": float(x.base_salary) if x.base_salary is not None else None,
        "created_by": x.created_by,
        "created_by_email": x.creator.email if x.creator else None,
        "created_at": x.created_at.isoformat() if x.created_at else None,
    }


def _json():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.get("")
@requires_roles()
def list_levels():
    page, limit = page_limit()
    rows, total = svc.list_levels(page, limit)
    return paged([_row(x) for x in rows], page, limit, total)


@bp.get("/<lid>")
@requires_roles()
def get_level(lid):
    return ok(_row(svc.get_level_or_404(parse_id(lid, "level"))))


@bp.post("")
@requires_roles("admin")
def create_level():
    data = _json()
    lvl = svc.create_level(
        current_principal(),
        level_name=clean_str(data.get("level_name"), "level_name", required=True, max_len=120),
        base_salary=parse_amount(data.get("base_salary"), "base_salary", required=True),
    )
    return ok(_row(lvl), status=201)


@bp.patch("/<lid>")
@requires_roles("admin")
def update_level(lid):
    data = _json()
    kw = {}
    if "level_name" in data:
        kw["level_name"] = clean_str(data.get("level_name"), "level_name", required=True, max_len=120)
    if "base_salary" in data:
        kw["base_salary"] = parse_amount(data.get("base_salary"), "base_salary", required=True)
    lvl = svc.update_level(current_principal(), parse_id(lid, "level"), **kw)
    return ok(_row(lvl))


@bp.delete("/<lid>")
@requires_roles("admin")
def delete_level(lid):
    svc.delete_level(current_principal(), parse_id(lid, "level"))
    return ok({"message": "Level deleted"})
