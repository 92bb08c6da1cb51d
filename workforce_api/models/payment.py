from datetime import datetime
from workforce_api.extensions import db

PAYMENT_STATUSES = ("pending", "approved", "completed")


class Payment(db.Model):
    """One scheduled compensation event for one employee."""
    __tablename__ = "payments"

    id          = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True)

    amount    = db.Column(db.Numeric(14, 2), nullable=False)   # snapshot, independent of later salary edits
    due_date  = db.Column(db.Date, nullable=False, index=True)
    paid_date = db.Column(db.DateTime, nullable=True)
    status    = db.Column(db.Enum(*PAYMENT_STATUSES, name="payment_status_enum"), nullable=False, default="pending", index=True)

    paid_by   = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    proof_url = db.Column(db.String(500), nullable=True)
    notes     = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=True, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", lazy="joined")
    payer    = db.relationship("User", lazy="joined")


class PartnerPayment(db.Model):
    """Settlement from the admin to a partner agency itself."""
    __tablename__ = "partner_payments"

    id         = db.Column(db.Integer, primary_key=True)
    partner_id = db.Column(db.Integer, db.ForeignKey("partners.id", ondelete="RESTRICT"), nullable=False, index=True)

    amount    = db.Column(db.Numeric(14, 2), nullable=False)
    due_date  = db.Column(db.Date, nullable=False, index=True)
    paid_date = db.Column(db.DateTime, nullable=True)
    status    = db.Column(db.Enum(*PAYMENT_STATUSES, name="partner_payment_status_enum"), nullable=False, default="pending", index=True)

    paid_by   = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    proof_url = db.Column(db.String(500), nullable=True)
    notes     = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=True, onupdate=datetime.utcnow)

    partner = db.relationship("Partner", lazy="joined")
    payer   = db.relationship("User", lazy="joined")
