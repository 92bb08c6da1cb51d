from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union

from workforce_api.extensions import db

HOUSE = "house"
PARTNER = "partner"
APPROVAL_STATUSES = ("pending", "approved")


# ---- provenance: who supplied the employee ----
@dataclass(frozen=True)
class House:
    """Supplied by the admin's own staff pool."""
    kind = HOUSE


@dataclass(frozen=True)
class PartnerProvider:
    partner_id: int
    kind = PARTNER


Provider = Union[House, PartnerProvider]


class Employee(db.Model):
    __tablename__ = "employees"

    id   = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), unique=True, nullable=False)   # external id, immutable
    name = db.Column(db.String(255), nullable=False)
    nid  = db.Column(db.String(64), nullable=False)                # national identity
    photo   = db.Column(db.String(500), nullable=True)             # opaque URL from the upload flow
    details = db.Column(db.JSON, nullable=True)

    salary = db.Column(db.Numeric(14, 2), nullable=False)
    level_id = db.Column(db.Integer, db.ForeignKey("employee_levels.id", ondelete="RESTRICT"), nullable=True)

    # provider_kind='house' -> partner_id NULL; provider_kind='partner' -> partner_id set
    provider_kind = db.Column(db.Enum(HOUSE, PARTNER, name="employee_provider_enum"), nullable=False, default=HOUSE)
    partner_id    = db.Column(db.Integer, db.ForeignKey("partners.id", ondelete="RESTRICT"), nullable=True)

    approval_status = db.Column(db.Enum(*APPROVAL_STATUSES, name="employee_approval_enum"), nullable=False, default="pending")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=True, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint(
            "(provider_kind = 'house' AND partner_id IS NULL) OR "
            "(provider_kind = 'partner' AND partner_id IS NOT NULL)",
            name="ck_employee_provider",
        ),
        db.Index("ix_emp_partner_id", "partner_id"),
        db.Index("ix_emp_created_at", "created_at"),
        db.Index("ix_emp_level_id", "level_id"),
    )

    partner = db.relationship("Partner", lazy="joined", backref=db.backref("employees", lazy="dynamic"))
    level   = db.relationship("Level", lazy="joined")

    @property
    def provider(self) -> Provider:
        if self.provider_kind == PARTNER:
            return PartnerProvider(self.partner_id)
        return House()

    @provider.setter
    def provider(self, value: Provider):
        if isinstance(value, PartnerProvider):
            self.provider_kind = PARTNER
            self.partner_id = value.partner_id
        elif isinstance(value, House):
            self.provider_kind = HOUSE
            self.partner_id = None
        else:
            raise TypeError(f"unsupported provider: {value!r}")

    @property
    def is_approved(self) -> bool:
        return self.approval_status == "approved"

    def __repr__(self) -> str:
        return f"<Employee id={self.id} code={self.code!r}>"
