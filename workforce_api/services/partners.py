# workforce_api/services/partners.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import exists, or_

from workforce_api.extensions import db
from workforce_api.common.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from workforce_api.models.employee import Employee
from workforce_api.models.partner import Partner
from workforce_api.models.payment import PartnerPayment
from workforce_api.models.user import User

log = logging.getLogger(__name__)

EDITABLE = ("company_name", "company_details", "contact_person", "contact_phone")


def _require_admin(principal):
    if principal.role != "admin":
        raise ForbiddenError("Only admin can manage partners")


def _load(partner_id: int) -> Partner:
    p = db.session.get(Partner, partner_id)
    if p is None:
        raise NotFoundError("Partner not found")
    return p


def list_partners(principal, q: Optional[str] = None, page: int = 1, limit: int = 20) -> Tuple[List[Partner], int]:
    _require_admin(principal)
    query = Partner.query
    if q:
        like = f"%{q}%"
        query = query.join(User, User.id == Partner.user_id).filter(
            or_(Partner.company_name.ilike(like), Partner.contact_person.ilike(like), User.email.ilike(like))
        )
    total = query.count()
    rows = query.order_by(Partner.created_at.desc(), Partner.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def get_partner(principal, partner_id: int) -> Partner:
    _require_admin(principal)
    return _load(partner_id)


def create_partner(principal, data: Dict[str, Any]) -> Partner:
    """Provision the partner login and its company profile together."""
    _require_admin(principal)
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    if not email:
        raise ValidationError("email is required")
    if len(password) < 6:
        raise ValidationError("password must be at least 6 characters")
    for f in ("company_name", "company_details"):
        if not data.get(f):
            raise ValidationError(f"{f} is required")
    if User.query.filter_by(email=email).first() is not None:
        raise ValidationError("Email already registered")

    user = User(email=email, full_name=data.get("full_name") or data.get("contact_person"), role="partner")
    user.set_password(password)
    db.session.add(user)
    db.session.flush()

    partner = Partner(
        user_id=user.id,
        company_name=data["company_name"],
        company_details=data["company_details"],
        contact_person=data.get("contact_person"),
        contact_phone=data.get("contact_phone"),
        created_by=principal.id,
    )
    db.session.add(partner)
    db.session.commit()
    log.info("partner created id=%s user=%s by=%s", partner.id, user.id, principal.id)
    return partner


def update_partner(principal, partner_id: int, changes: Dict[str, Any]) -> Partner:
    _require_admin(principal)
    partner = _load(partner_id)
    for field in EDITABLE:
        if field not in changes:
            continue
        if field in ("company_name", "company_details") and not changes[field]:
            raise ValidationError(f"{field} is required")
        setattr(partner, field, changes[field])
    db.session.commit()
    return partner


def delete_partner(principal, partner_id: int) -> None:
    """Refused while employees or settlements still point at the partner."""
    _require_admin(principal)
    partner = _load(partner_id)

    has_emps = db.session.query(exists().where(Employee.partner_id == partner.id)).scalar()
    has_pays = db.session.query(exists().where(PartnerPayment.partner_id == partner.id)).scalar()
    if has_emps or has_pays:
        log.warning("partner delete refused id=%s employees=%s payments=%s", partner.id, has_emps, has_pays)
        raise ConflictError("Partner has employees or partner payments")

    user = partner.user
    db.session.delete(partner)
    if user is not None:
        db.session.delete(user)
    db.session.commit()
    log.info("partner deleted id=%s by=%s", partner_id, principal.id)
