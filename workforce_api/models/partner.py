from datetime import datetime
from workforce_api.extensions import db

class Partner(db.Model):
    """Partner agency: company metadata wrapped around a 'partner' login account."""
    __tablename__ = "partners"

    id              = db.Column(db.Integer, primary_key=True)
    user_id         = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    company_name    = db.Column(db.String(255), nullable=False)
    company_details = db.Column(db.Text, nullable=False)
    contact_person  = db.Column(db.String(120), nullable=True)
    contact_phone   = db.Column(db.String(40), nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user    = db.relationship("User", foreign_keys=[user_id], lazy="joined")
    creator = db.relationship("User", foreign_keys=[created_by])

    def __repr__(self) -> str:
        return f"<Partner id={self.id} company={self.company_name!r}>"
