from datetime import date
from decimal import Decimal

import pytest

from workforce_api.extensions import db
from workforce_api.common.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from workforce_api.models.employee import Employee, House, PartnerProvider
from workforce_api.models.partner import Partner
from workforce_api.models.payment import PartnerPayment
from workforce_api.models.user import User
from workforce_api.services import employees as emp_svc
from workforce_api.services import partner_payments as pp_svc
from workforce_api.services import partners as partner_svc
from workforce_api.services import payments as pay_svc

from conftest import make_user, principal


def _body(code, salary="12000"):
    return {"code": code, "name": f"Worker {code}", "nid": f"NID-{code}", "salary": Decimal(salary)}


# ---------- employees ----------
def test_provenance_depends_on_creator(world):
    staff_made = emp_svc.create_employee(principal(world["staff"]), _body("S-1"))
    assert staff_made.provider == House()
    assert staff_made.is_approved

    partner_made = emp_svc.create_employee(principal(world["p1_user"]), _body("P-1"))
    assert partner_made.provider == PartnerProvider(world["p1"].id)
    assert partner_made.approval_status == "pending"


def test_duplicate_code_rejected(world):
    with pytest.raises(ValidationError):
        emp_svc.create_employee(principal(world["admin"]), _body("H-1"))


def test_batch_create_is_all_or_nothing(world):
    admin = principal(world["admin"])
    with pytest.raises(ValidationError) as ei:
        emp_svc.batch_create_employees(admin, [_body("N-1"), _body("N-2"), _body("N-1"), _body("A-1")])
    assert ei.value.payload == {"duplicates": ["A-1", "N-1"]}
    assert Employee.query.filter(Employee.code.like("N-%")).count() == 0

    rows = emp_svc.batch_create_employees(admin, [_body("N-1"), _body("N-2")])
    assert [r.code for r in rows] == ["N-1", "N-2"]


def test_list_filters_and_scope(world):
    rows, total = emp_svc.list_employees(principal(world["p1_user"]))
    assert [r.code for r in rows] == ["A-1"]

    f = emp_svc.EmployeeFilters(q="B-", provider=world["p2"].id)
    rows, total = emp_svc.list_employees(principal(world["admin"]), f)
    assert total == 1 and rows[0].code == "B-1"

    f = emp_svc.EmployeeFilters(min_salary=Decimal("20000"))
    assert emp_svc.list_employees(principal(world["admin"]), f)[1] == 0


def test_code_is_immutable_and_scope_enforced_on_update(world):
    with pytest.raises(ValidationError):
        emp_svc.update_employee(principal(world["admin"]), world["house"].id, {"code": "X"})
    with pytest.raises(ForbiddenError):
        emp_svc.update_employee(principal(world["p1_user"]), world["emp2"].id, {"name": "Nope"})

    e = emp_svc.update_employee(principal(world["p1_user"]), world["emp1"].id, {"salary": Decimal("18000")})
    assert e.salary == Decimal("18000")


def test_approval_toggle(world):
    admin = principal(world["admin"])
    with pytest.raises(ValidationError):
        emp_svc.set_approval(admin, world["house"].id, False)
    e = emp_svc.set_approval(admin, world["emp1"].id, False)
    assert e.approval_status == "pending"
    with pytest.raises(ForbiddenError):
        emp_svc.set_approval(principal(world["p1_user"]), world["emp1"].id, True)


def test_delete_employee_guards(world):
    admin = principal(world["admin"])
    pay_svc.create_payment(admin, world["house"].id, date(2025, 3, 1))
    with pytest.raises(ConflictError):
        emp_svc.delete_employee(admin, world["house"].id)
    with pytest.raises(ForbiddenError):
        emp_svc.delete_employee(principal(world["staff"]), world["house"].id)
    with pytest.raises(ForbiddenError):
        emp_svc.delete_employee(principal(world["p1_user"]), world["emp2"].id)

    emp_svc.delete_employee(principal(world["p1_user"]), world["emp1"].id)
    assert Employee.query.filter_by(code="A-1").first() is None


# ---------- partners ----------
def test_partner_directory_roundtrip(world):
    admin = principal(world["admin"])
    p = partner_svc.create_partner(admin, {
        "email": "New@Agency.test", "password": "s3cret!", "company_name": "Gamma",
        "company_details": "Drivers", "contact_person": "G. Person",
    })
    assert p.user.email == "new@agency.test"
    assert p.user.role == "partner"
    assert p.user.check_password("s3cret!")

    with pytest.raises(ValidationError):
        partner_svc.create_partner(admin, {"email": "new@agency.test", "password": "s3cret!",
                                           "company_name": "X", "company_details": "Y"})
    with pytest.raises(ForbiddenError):
        partner_svc.list_partners(principal(world["staff"]))

    partner_svc.delete_partner(admin, p.id)
    assert db.session.get(Partner, p.id) is None
    assert User.query.filter_by(email="new@agency.test").first() is None


def test_partner_with_employees_cannot_be_deleted(world):
    with pytest.raises(ConflictError):
        partner_svc.delete_partner(principal(world["admin"]), world["p1"].id)


# ---------- partner payments ----------
def test_partner_payment_flow(world):
    admin, p1 = principal(world["admin"]), principal(world["p1_user"])
    pp = pp_svc.create_partner_payment(admin, world["p1"].id, Decimal("5000"), date(2025, 3, 1))
    assert pp.status == "pending"

    pp = pp_svc.mark_paid(p1, pp.id, proof_url="https://files.test/pp.png")
    assert pp.status == "approved"
    assert pp.paid_by == world["p1_user"].id

    pp = pp_svc.approve(admin, pp.id)
    assert pp.status == "completed"

    with pytest.raises(ValidationError):
        pp_svc.approve(admin, pp.id)


def test_partner_payment_visibility(world):
    admin = principal(world["admin"])
    mine = pp_svc.create_partner_payment(admin, world["p1"].id, Decimal("10"), date(2025, 3, 1))
    theirs = pp_svc.create_partner_payment(admin, world["p2"].id, Decimal("20"), date(2025, 3, 2))

    rows, total = pp_svc.list_partner_payments(principal(world["p1_user"]))
    assert [r.id for r in rows] == [mine.id]

    with pytest.raises(ForbiddenError):
        pp_svc.get_partner_payment(principal(world["p1_user"]), theirs.id)
    with pytest.raises(ForbiddenError):
        pp_svc.mark_paid(principal(world["p1_user"]), theirs.id)
    with pytest.raises(ForbiddenError):
        pp_svc.list_partner_payments(principal(world["staff"]))

    orphan = make_user("orphan@test.local", "partner")
    with pytest.raises(NotFoundError):
        pp_svc.list_partner_payments(principal(orphan))


def test_admin_mark_paid_completes_partner_payment(world):
    admin = principal(world["admin"])
    pp = pp_svc.create_partner_payment(admin, world["p2"].id, Decimal("10"), date(2025, 3, 1))
    pp = pp_svc.mark_paid(admin, pp.id)
    assert pp.status == "completed"
    assert db.session.get(PartnerPayment, pp.id).paid_date is not None

    with pytest.raises(NotFoundError):
        pp_svc.create_partner_payment(admin, 999, Decimal("10"), date(2025, 3, 1))
