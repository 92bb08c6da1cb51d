from datetime import datetime
from workforce_api.extensions import db

# Routes and jobs are owned by the scheduling side; only the columns the
# dashboard and the delete guards read are mapped here.

job_employees = db.Table(
    "job_employees",
    db.Column("job_id", db.Integer, db.ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
    db.Column("employee_id", db.Integer, db.ForeignKey("employees.id", ondelete="RESTRICT"), primary_key=True),
)


class Route(db.Model):
    __tablename__ = "routes"

    id      = db.Column(db.Integer, primary_key=True)
    name    = db.Column(db.String(255), nullable=False)
    point_a = db.Column(db.String(255), nullable=False)
    point_b = db.Column(db.String(255), nullable=False)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class Job(db.Model):
    """Assignment of employees to a route."""
    __tablename__ = "jobs"

    id       = db.Column(db.Integer, primary_key=True)
    route_id = db.Column(db.Integer, db.ForeignKey("routes.id", ondelete="RESTRICT"), nullable=False, index=True)
    status   = db.Column(db.Enum("active", "inactive", name="job_status_enum"), nullable=False, default="active")

    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    route     = db.relationship("Route", lazy="joined")
    employees = db.relationship("Employee", secondary=job_employees, lazy="selectin")
