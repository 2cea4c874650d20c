from datetime import date
from decimal import Decimal

from sqlalchemy import create_engine

import main
from database import check_connection


def create_invoice(client, **payload):
    payload.setdefault("amount", 1500)
    resp = client.post("/invoices", json=payload)
    assert resp.status_code == 201
    return resp.json()


def test_health_checks_database(client, engine, monkeypatch):
    monkeypatch.setattr(main, "check_connection", lambda: check_connection(engine))

    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "ok"}


def test_health_reports_unreachable_database(client, tmp_path, monkeypatch):
    unreachable = create_engine(f"sqlite:///{tmp_path}/missing/dir/app.db")
    monkeypatch.setattr(main, "check_connection", lambda: check_connection(unreachable))

    resp = client.get("/health")

    assert resp.status_code == 503
    assert resp.json() == {"status": "degraded", "database": "unavailable"}


def test_create_and_fetch_invoice(client, make_user):
    tenant_id = make_user()

    created = create_invoice(client, tenant_id=str(tenant_id))

    assert created["tenant_id"] == str(tenant_id)
    assert created["invoice_number"] == "INV-20240315100000"
    assert created["due_date"] == "2024-04-01"
    assert created["status"] == "pending"
    assert created["pdf_url"] == f"/invoices/{created['id']}/pdf"
    assert Decimal(created["amount"]) == Decimal("1500")

    resp = client.get(f"/invoices/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["invoice_number"] == created["invoice_number"]


def test_create_is_idempotent_per_period(client, make_user):
    tenant_id = make_user()

    first = create_invoice(client, tenant_id=tenant_id)
    second = create_invoice(client, tenant_id=tenant_id, amount=10)

    assert second["id"] == first["id"]
    assert len(client.get("/invoices").json()) == 1


def test_create_rejects_negative_amount(client):
    resp = client.post("/invoices", json={"amount": -5})
    assert resp.status_code == 422


def test_create_rejects_bad_reference(client):
    resp = client.post("/invoices", json={"amount": 5, "tenant_id": "abc"})
    assert resp.status_code == 400


def test_get_missing_invoice(client):
    assert client.get("/invoices/999").status_code == 404
    assert client.get("/invoices/not-an-id").status_code == 400


def test_list_filters(client, make_user):
    tenant_id = make_user()
    invoice = create_invoice(client, tenant_id=tenant_id)
    create_invoice(client)

    by_tenant = client.get("/invoices", params={"tenant_id": tenant_id}).json()
    assert [inv["id"] for inv in by_tenant] == [invoice["id"]]

    assert len(client.get("/invoices", params={"status": "pending"}).json()) == 2
    assert client.get("/invoices", params={"status": "paid"}).json() == []
    assert client.get("/invoices", params={"status": "void"}).status_code == 422


def test_status_update(client):
    invoice = create_invoice(client)

    resp = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"
    assert resp.json()["paid_at"] is not None

    resp = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "pending"})
    assert resp.status_code == 409

    resp = client.patch("/invoices/999/status", json={"status": "paid"})
    assert resp.status_code == 404

    resp = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "cancelled"})
    assert resp.status_code == 422


def test_download_artifacts(client):
    invoice = create_invoice(client, tenant_name="Jane Doe")

    pdf = client.get(invoice["pdf_url"])
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert 'filename="INV-20240315100000.pdf"' in pdf.headers["content-disposition"]
    assert pdf.content.startswith(b"%PDF")

    markdown = client.get(invoice["markdown_url"])
    assert markdown.status_code == 200
    assert markdown.headers["content-type"].startswith("text/markdown")
    assert "## Bill To" in markdown.text
    assert "**Jane Doe**" in markdown.text

    assert client.get("/invoices/999/pdf").status_code == 404


def test_delete_invoice(client):
    invoice = create_invoice(client)

    assert client.delete(f"/invoices/{invoice['id']}").status_code == 204
    assert client.get(f"/invoices/{invoice['id']}").status_code == 404
    assert client.delete(f"/invoices/{invoice['id']}").status_code == 404


def test_generate_monthly(client, make_user, make_property, make_lease):
    manager_id = make_user(role="manager")
    lease_id = make_lease(make_property(manager_id=manager_id), make_user())
    make_lease(make_property(), make_user(), end=date(2024, 1, 31))

    resp = client.post("/invoices/generate-monthly")
    assert resp.status_code == 200
    assert [inv["lease_id"] for inv in resp.json()] == [str(lease_id)]

    resp = client.post("/invoices/generate-monthly", json={"manager_id": make_user(role="manager")})
    assert resp.status_code == 200
    assert resp.json() == []


def test_process_overdue(client, make_user, make_property):
    manager_id = make_user(role="manager")
    late = create_invoice(client, issue_date="2024-02-01", property_id=make_property(manager_id=manager_id))
    create_invoice(client)

    resp = client.post("/invoices/process-overdue", json={"manager_id": str(manager_id)})

    assert resp.status_code == 200
    body = resp.json()
    assert [inv["id"] for inv in body] == [late["id"]]
    assert body[0]["status"] == "overdue"
    assert body[0]["overdue_days"] == 14


def test_tenant_summary_and_export(client, make_user):
    tenant_id = make_user()
    create_invoice(client, tenant_id=tenant_id, amount=1000)
    paid = create_invoice(client, tenant_id=tenant_id, amount=200, issue_date="2024-02-01")
    client.patch(f"/invoices/{paid['id']}/status", json={"status": "paid"})

    summary = client.get(f"/invoices/tenant/{tenant_id}/summary")
    assert summary.status_code == 200
    assert summary.json()["total_owed"] == 1000.0
    assert summary.json()["paid_count"] == 1

    export = client.get("/invoices/export", params={"tenant_id": tenant_id})
    assert export.status_code == 200
    body = export.json()
    assert body["total_invoices"] == 2
    assert body["summary"]["total_amount"] == 1200.0
    assert body["summary"]["paid_count"] == 1


def test_taken_invoice_number_is_a_conflict(client, make_user):
    create_invoice(client, tenant_id=make_user(), invoice_number="INV-X")

    resp = client.post("/invoices", json={"tenant_id": make_user(), "amount": 1, "invoice_number": "INV-X"})

    assert resp.status_code == 409


def test_initial_lease_invoice(client, make_user, make_property, make_lease):
    lease_id = make_lease(make_property(), make_user(), rent="1200.00", start=date(2024, 2, 10))

    resp = client.post(f"/invoices/lease/{lease_id}/initial")
    assert resp.status_code == 201
    body = resp.json()
    assert body["lease_id"] == str(lease_id)
    assert body["issue_date"] == "2024-02-10"
    assert body["due_date"] == "2024-03-01"
    assert body["source"] == "lease"

    again = client.post(f"/invoices/lease/{lease_id}/initial")
    assert again.json()["id"] == body["id"]

    assert client.post("/invoices/lease/999/initial").status_code == 404
