from datetime import datetime
from workforce_api.extensions import db

class Level(db.Model):
    """Pay grade an employee is hired at; base_salary is the suggested starting salary."""
    __tablename__ = "employee_levels"

    id          = db.Column(db.Integer, primary_key=True)
    level_name  = db.Column(db.String(120), unique=True, nullable=False)
    base_salary = db.Column(db.Numeric(14, 2), nullable=False)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    creator = db.relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<Level id={self.id} name={self.level_name!r}>"
