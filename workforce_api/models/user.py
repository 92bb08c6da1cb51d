from datetime import datetime
from workforce_api.extensions import db
from werkzeug.security import generate_password_hash, check_password_hash

ROLES = ("admin", "partner", "staff")

class User(db.Model):
    __tablename__ = "users"

    id           = db.Column(db.Integer, primary_key=True)
    email        = db.Column(db.String(255), unique=True, index=True, nullable=False)
    password_hash= db.Column(db.String(255), nullable=False)
    full_name    = db.Column(db.String(255), nullable=True)
    role         = db.Column(db.Enum(*ROLES, name="user_role_enum"), nullable=False)
    status       = db.Column(db.String(20), default="active")
    created_at   = db.Column(db.DateTime, default=datetime.utcnow)

    # --- helpers ---
    def set_password(self, raw: str):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return check_password_hash(self.password_hash, raw)

    # Optional convenience: resolve the partner profile without a relationship on the hot path.
    @property
    def partner_id(self):
        """
        Returns the Partner.id linked via Partner.user_id == self.id, or None.
        Late import to avoid circulars.
        """
        from workforce_api.models.partner import Partner
        p = Partner.query.filter_by(user_id=self.id).first()
        return p.id if p else None
