import os
from decimal import Decimal

import pytest
from flask_jwt_extended import create_access_token

from workforce_api import create_app
from workforce_api.extensions import db
from workforce_api.common.auth import Principal
from workforce_api.models.user import User
from workforce_api.models.partner import Partner
from workforce_api.models.employee import Employee, House, PartnerProvider


def _mk_app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    return create_app(overrides={"TESTING": True, "JWT_SECRET_KEY": "test-secret-key-with-enough-length-1234"})


@pytest.fixture
def app():
    app = _mk_app()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email, role, password="secret1"):
    u = User(email=email, full_name=email.split("@")[0], role=role, status="active")
    u.set_password(password)
    db.session.add(u)
    db.session.commit()
    return u


def make_partner(email="agency@test.local", company="Agency Ltd"):
    u = make_user(email, "partner")
    p = Partner(user_id=u.id, company_name=company, company_details="Supplies labour")
    db.session.add(p)
    db.session.commit()
    return u, p


def make_employee(code, salary="15000", partner=None, approved=True, **kw):
    e = Employee(code=code, name=f"Worker {code}", nid=f"NID-{code}", salary=Decimal(salary),
                 approval_status="approved" if approved else "pending", **kw)
    e.provider = PartnerProvider(partner.id) if partner is not None else House()
    db.session.add(e)
    db.session.commit()
    return e


def principal(user):
    return Principal(id=user.id, role=user.role)


def auth_header(user):
    token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def world(app):
    """Admin, staff, two partners, and one approved employee per provider."""
    admin = make_user("admin@test.local", "admin")
    staff = make_user("staff@test.local", "staff")
    p1_user, p1 = make_partner("p1@test.local", "Alpha Ltd")
    p2_user, p2 = make_partner("p2@test.local", "Beta Ltd")
    house = make_employee("H-1")
    emp1 = make_employee("A-1", partner=p1)
    emp2 = make_employee("B-1", partner=p2)
    return {
        "admin": admin, "staff": staff,
        "p1_user": p1_user, "p1": p1, "p2_user": p2_user, "p2": p2,
        "house": house, "emp1": emp1, "emp2": emp2,
    }
