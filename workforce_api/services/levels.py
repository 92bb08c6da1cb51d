# workforce_api/services/levels.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import exists

from workforce_api.extensions import db
from workforce_api.common.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from workforce_api.models.employee import Employee
from workforce_api.models.level import Level

log = logging.getLogger(__name__)


def _require_admin(principal):
    if principal.role != "admin":
        raise ForbiddenError("Only admin can manage levels")


def get_level_or_404(level_id: int) -> Level:
    lvl = db.session.get(Level, level_id)
    if lvl is None:
        raise NotFoundError("Level not found")
    return lvl


def _check_name_free(name: str, exclude_id: Optional[int] = None):
    q = Level.query.filter(db.func.lower(Level.level_name) == name.lower())
    if exclude_id is not None:
        q = q.filter(Level.id != exclude_id)
    if q.first() is not None:
        raise ValidationError("Level name already exists")


def list_levels(page: int = 1, limit: int = 20) -> Tuple[List[Level], int]:
    q = Level.query
    total = q.count()
    rows = q.order_by(Level.created_at.desc(), Level.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def create_level(principal, level_name: str, base_salary: Decimal) -> Level:
    _require_admin(principal)
    if not level_name:
        raise ValidationError("level_name is required")
    if base_salary is None or base_salary <= 0:
        raise ValidationError("base_salary must be positive")
    _check_name_free(level_name)

    lvl = Level(level_name=level_name, base_salary=base_salary, created_by=principal.id)
    db.session.add(lvl)
    db.session.commit()
    log.info("level created id=%s name=%s by=%s", lvl.id, lvl.level_name, principal.id)
    return lvl


def update_level(principal, level_id: int, level_name: Optional[str] = None,
                 base_salary: Optional[Decimal] = None) -> Level:
    """Existing employees keep their own salary; only the suggested base changes."""
    _require_admin(principal)
    lvl = get_level_or_404(level_id)
    if level_name is not None:
        if not level_name:
            raise ValidationError("level_name is required")
        _check_name_free(level_name, exclude_id=lvl.id)
        lvl.level_name = level_name
    if base_salary is not None:
        if base_salary <= 0:
            raise ValidationError("base_salary must be positive")
        lvl.base_salary = base_salary
    db.session.commit()
    return lvl


def delete_level(principal, level_id: int) -> None:
    _require_admin(principal)
    lvl = get_level_or_404(level_id)
    if db.session.query(exists().where(Employee.level_id == lvl.id)).scalar():
        log.warning("level delete refused id=%s: employees assigned", lvl.id)
        raise ConflictError("Level is assigned to employees")
    db.session.delete(lvl)
    db.session.commit()
    log.info("level deleted id=%s by=%s", level_id, principal.id)
