from datetime import date
from decimal import Decimal

import pytest

from workforce_api.extensions import db
from workforce_api.common.errors import ForbiddenError, NotFoundError, ValidationError
from workforce_api.models.payment import Payment
from workforce_api.services import payments as svc

from conftest import make_employee, make_user, principal


def test_admin_creates_pending_payment_at_salary(world):
    admin = principal(world["admin"])
    p = svc.create_payment(admin, world["house"].id, date(2025, 3, 1))

    assert p.status == "pending"
    assert p.amount == Decimal("15000.00")
    assert p.paid_date is None and p.paid_by is None


def test_staff_mark_paid_then_admin_approves(world):
    admin, staff = principal(world["admin"]), principal(world["staff"])
    p = svc.create_payment(admin, world["house"].id, date(2025, 3, 1))

    p = svc.mark_paid(staff, p.id, proof_url="https://files.test/r.png")
    assert p.status == "approved"
    assert p.paid_by == world["staff"].id
    assert p.paid_date is not None
    assert p.proof_url == "https://files.test/r.png"

    p = svc.review_payment(admin, p.id, True)
    assert p.status == "completed"


def test_admin_mark_paid_completes_directly(world):
    admin = principal(world["admin"])
    p = svc.create_payment(admin, world["emp1"].id, date(2025, 3, 1))

    p = svc.mark_paid(admin, p.id)
    assert p.status == "completed"
    assert p.paid_by == world["admin"].id


def test_reject_returns_approved_payment_to_pending(world):
    admin, partner = principal(world["admin"]), principal(world["p1_user"])
    p = svc.create_payment(admin, world["emp1"].id, date(2025, 3, 1))
    svc.mark_paid(partner, p.id)

    p = svc.review_payment(admin, p.id, False)
    assert p.status == "pending"
    # attribution of the last mark-paid stays on the record
    assert p.paid_by == world["p1_user"].id


def test_reject_on_pending_is_validation_error(world):
    admin = principal(world["admin"])
    p = svc.create_payment(admin, world["house"].id, date(2025, 3, 1))

    with pytest.raises(ValidationError) as ei:
        svc.review_payment(admin, p.id, False)
    assert "approved status" in ei.value.message
    assert db.session.get(Payment, p.id).status == "pending"


def test_completed_payment_cannot_move(world):
    admin = principal(world["admin"])
    p = svc.create_payment(admin, world["house"].id, date(2025, 3, 1))
    svc.mark_paid(admin, p.id)

    with pytest.raises(ValidationError):
        svc.mark_paid(admin, p.id)
    with pytest.raises(ValidationError):
        svc.review_payment(admin, p.id, False)
    assert db.session.get(Payment, p.id).status == "completed"


def test_unapproved_employee_cannot_be_paid(world):
    pending = make_employee("A-2", partner=world["p1"], approved=False)
    with pytest.raises(ValidationError) as ei:
        svc.create_payment(principal(world["admin"]), pending.id, date(2025, 3, 1))
    assert ei.value.message == "Employee must be approved first"
    assert Payment.query.count() == 0


def test_only_admin_creates_or_approves(world):
    admin, staff = principal(world["admin"]), principal(world["staff"])
    with pytest.raises(ForbiddenError):
        svc.create_payment(staff, world["house"].id, date(2025, 3, 1))

    p = svc.create_payment(admin, world["house"].id, date(2025, 3, 1))
    svc.mark_paid(staff, p.id)
    with pytest.raises(ForbiddenError):
        svc.review_payment(staff, p.id, True)


def test_staff_cannot_pay_partner_employees(world):
    admin, staff = principal(world["admin"]), principal(world["staff"])
    p = svc.create_payment(admin, world["emp1"].id, date(2025, 3, 1))

    with pytest.raises(ForbiddenError) as ei:
        svc.mark_paid(staff, p.id)
    assert ei.value.message == "Staff can only pay house employees"
    assert db.session.get(Payment, p.id).paid_by is None


def test_partner_cannot_pay_other_partners_employee(world):
    admin = principal(world["admin"])
    p = svc.create_payment(admin, world["emp2"].id, date(2025, 3, 1))

    with pytest.raises(ForbiddenError):
        svc.mark_paid(principal(world["p1_user"]), p.id)


def test_unknown_payment_is_not_found(world):
    with pytest.raises(NotFoundError):
        svc.mark_paid(principal(world["admin"]), 999)
    with pytest.raises(NotFoundError):
        svc.review_payment(principal(world["admin"]), 999, True)


def test_update_keeps_status_and_snapshot_ignores_salary_change(world):
    admin = principal(world["admin"])
    emp = world["house"]
    p = svc.create_payment(admin, emp.id, date(2025, 3, 1))

    emp.salary = Decimal("20000")
    db.session.commit()
    assert db.session.get(Payment, p.id).amount == Decimal("15000.00")

    p = svc.update_payment(admin, p.id, amount=Decimal("16000.00"), notes="bonus")
    assert p.amount == Decimal("16000.00")
    assert p.status == "pending"

    with pytest.raises(ValidationError):
        svc.update_payment(admin, p.id, amount=Decimal("0"))


def test_delete_payment(world):
    admin = principal(world["admin"])
    p = svc.create_payment(admin, world["house"].id, date(2025, 3, 1))
    pid = p.id
    svc.delete_payment(admin, pid)
    assert Payment.query.count() == 0
    with pytest.raises(NotFoundError):
        svc.delete_payment(admin, pid)


def test_partner_without_profile_gets_not_found(world):
    orphan = make_user("orphan@test.local", "partner")
    with pytest.raises(NotFoundError) as ei:
        svc.list_payments(principal(orphan))
    assert ei.value.message == "Partner profile not found"


def test_month_window_rejects_impossible_year(world):
    admin = principal(world["admin"])
    with pytest.raises(ValidationError):
        svc.list_payments(admin, svc.PaymentFilters(month=3, year=10000))
    with pytest.raises(ValidationError):
        svc.list_payments(admin, svc.PaymentFilters(month=13, year=2025))
    rows, total = svc.list_payments(admin, svc.PaymentFilters(month=12, year=9999))
    assert total == 0
