from workforce_api.extensions import db
from workforce_api.models.payment import Payment

from conftest import auth_header, make_employee, make_user


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "ok"


def test_login_and_me(client, world):
    r = client.post("/api/v1/auth/login", json={"email": "P1@test.local", "password": "secret1"})
    assert r.status_code == 200
    body = r.get_json()["data"]
    assert body["user"]["role"] == "partner"
    assert body["user"]["partner_id"] == world["p1"].id

    r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access']}"})
    assert r.status_code == 200
    assert r.get_json()["data"]["email"] == "p1@test.local"

    r = client.post("/api/v1/auth/login", json={"email": "p1@test.local", "password": "wrong"})
    assert r.status_code == 401
    assert r.get_json()["error"]["code"] == "UNAUTHENTICATED"


def test_missing_token_is_401(client, world):
    r = client.get("/api/v1/payments")
    assert r.status_code == 401
    assert r.get_json()["success"] is False


def test_payment_scenarios_over_http(client, world):
    admin_h, staff_h = auth_header(world["admin"]), auth_header(world["staff"])

    # A: create at salary
    r = client.post("/api/v1/payments", headers=admin_h,
                    json={"employee_id": world["house"].id, "due_date": "2025-03-01"})
    assert r.status_code == 201
    pay = r.get_json()["data"]
    assert pay["amount"] == 15000.0 and pay["status"] == "pending"

    # B: staff mark-paid -> approved
    r = client.post(f"/api/v1/payments/{pay['id']}/mark-paid", headers=staff_h,
                    json={"proof_url": "https://files.test/receipt.jpg"})
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "approved"
    assert r.get_json()["data"]["paid_by"] == world["staff"].id

    # C: admin approves -> completed
    r = client.post(f"/api/v1/payments/{pay['id']}/approve", headers=admin_h, json={"approved": True})
    assert r.get_json()["data"]["status"] == "completed"

    # D: admin mark-paid on a fresh payment -> completed immediately
    r = client.post("/api/v1/payments", headers=admin_h,
                    json={"employee_id": world["emp1"].id, "due_date": "2025-03-01"})
    other = r.get_json()["data"]
    r = client.post(f"/api/v1/payments/{other['id']}/mark-paid", headers=admin_h, json={})
    assert r.get_json()["data"]["status"] == "completed"


def test_batch_create_over_http(client, world):
    pending = make_employee("A-7", partner=world["p1"], approved=False)
    r = client.post("/api/v1/payments/batch", headers=auth_header(world["admin"]), json={
        "employee_ids": [world["house"].id, world["emp1"].id, pending.id],
        "due_date": "2025-04-01",
    })
    assert r.status_code == 201
    data = r.get_json()["data"]
    assert data["count"] == 2
    assert data["skipped_employee_ids"] == [pending.id]


def test_partner_without_profile_gets_404(client, world):
    orphan = make_user("orphan@test.local", "partner")
    r = client.get("/api/v1/payments", headers=auth_header(orphan))
    assert r.status_code == 404
    assert r.get_json()["error"]["message"] == "Partner profile not found"


def test_error_classification(client, world):
    admin_h = auth_header(world["admin"])
    r = client.post("/api/v1/payments", headers=admin_h,
                    json={"employee_id": world["house"].id, "due_date": "2025-03-01"})
    pid = r.get_json()["data"]["id"]

    r = client.post(f"/api/v1/payments/{pid}/approve", headers=admin_h, json={"approved": False})
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "VALIDATION_ERROR"

    r = client.get("/api/v1/payments/abc", headers=admin_h)
    assert r.status_code == 422
    assert r.get_json()["error"]["message"] == "Invalid payment ID"

    r = client.get("/api/v1/payments/9999", headers=admin_h)
    assert r.status_code == 404

    r = client.post("/api/v1/payments", headers=auth_header(world["staff"]),
                    json={"employee_id": world["house"].id, "due_date": "2025-03-01"})
    assert r.status_code == 403

    r = client.post(f"/api/v1/payments/{pid}/mark-paid", headers=auth_header(world["p1_user"]), json={})
    assert r.status_code == 403
    assert db.session.get(Payment, pid).status == "pending"

    r = client.post(f"/api/v1/payments/{pid}/mark-paid", headers=admin_h, json={"proof_url": "ftp://x"})
    assert r.status_code == 422


def test_list_meta_and_summary(client, world):
    admin_h = auth_header(world["admin"])
    for key in ("house", "emp1", "emp2"):
        client.post("/api/v1/payments", headers=admin_h,
                    json={"employee_id": world[key].id, "due_date": "2025-03-01"})

    r = client.get("/api/v1/payments?limit=2&page=1", headers=admin_h)
    body = r.get_json()
    assert len(body["data"]) == 2
    assert body["meta"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}

    r = client.get("/api/v1/payments/summary", headers=auth_header(world["p1_user"]))
    data = r.get_json()["data"]
    assert data["summary"]["total"] == 1
    assert data["calendar"][0]["date"] == "2025-03-01"


def test_employee_and_dashboard_endpoints(client, world):
    p1_h = auth_header(world["p1_user"])
    r = client.post("/api/v1/employees", headers=p1_h,
                    json={"code": "A-50", "name": "New Hand", "nid": "NID50", "salary": 9000})
    assert r.status_code == 201
    emp = r.get_json()["data"]
    assert emp["provider"] == "partner" and emp["approval_status"] == "pending"

    r = client.post(f"/api/v1/employees/{emp['id']}/approve", headers=p1_h, json={"approved": True})
    assert r.status_code == 403

    r = client.post(f"/api/v1/employees/{emp['id']}/approve", headers=auth_header(world["admin"]),
                    json={"approved": True})
    assert r.get_json()["data"]["approval_status"] == "approved"

    r = client.get("/api/v1/dashboard/stats?months=3", headers=p1_h)
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["stats"]["total_employees"] == 2
    assert len(data["chart"]) == 3
    assert "total_partners" not in data["stats"]

    r = client.get("/api/v1/dashboard/stats?months=0", headers=p1_h)
    assert r.status_code == 422


def test_partner_endpoints_are_admin_only(client, world):
    r = client.get("/api/v1/partners", headers=auth_header(world["staff"]))
    assert r.status_code == 403

    r = client.post("/api/v1/partners", headers=auth_header(world["admin"]), json={
        "email": "gamma@test.local", "password": "gamma-pass",
        "company_name": "Gamma", "company_details": "Security guards",
    })
    assert r.status_code == 201
    assert r.get_json()["data"]["employee_count"] == 0

    r = client.delete(f"/api/v1/partners/{world['p1'].id}", headers=auth_header(world["admin"]))
    assert r.status_code == 409


def test_out_of_range_year_and_page(client, world):
    admin_h = auth_header(world["admin"])
    client.post("/api/v1/payments", headers=admin_h,
                json={"employee_id": world["house"].id, "due_date": "2025-03-01"})

    r = client.get("/api/v1/payments?month=3&year=10000", headers=admin_h)
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "VALIDATION_ERROR"

    r = client.get("/api/v1/payments?page=99999999999999999999", headers=admin_h)
    assert r.status_code == 200
    body = r.get_json()
    assert body["data"] == []
    assert body["meta"]["page"] == 100000 and body["meta"]["total"] == 1


def test_amount_above_column_precision_is_rejected(client, world):
    admin_h = auth_header(world["admin"])
    r = client.post("/api/v1/payments", headers=admin_h,
                    json={"employee_id": world["house"].id, "due_date": "2025-03-01", "amount": 1e13})
    assert r.status_code == 422
    assert db.session.query(Payment).count() == 0

    r = client.post("/api/v1/employees", headers=admin_h,
                    json={"code": "H-77", "name": "Rich", "nid": "NID77", "salary": "1000000000000"})
    assert r.status_code == 422
