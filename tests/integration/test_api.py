"""Integration tests for API endpoints"""

import uuid
from fastapi.testclient import TestClient


def post_sale(client: TestClient, **overrides):
    body = {
        "mode": "installments",
        "amount_cents": 9999,
        "installment_count": 4,
        "client_id": "client-42",
        "client_name": "Acme Ltda",
        "payment_method": "PIX",
    }
    body.update(overrides)
    return client.post("/v1/sales", json=body)


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    post_sale(client)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "ledger_plans_generated_total" in response.text
    assert "http_request_duration_seconds" in response.text


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_record_installment_sale(client: TestClient):
    """Test POST /v1/sales splits the amount and settles the first installment"""
    response = post_sale(client)

    assert response.status_code == 201
    data = response.json()
    assert data["total_cents"] == 9999
    assert [item["charge"]["total_cents"] for item in data["items"]] == [2500, 2500, 2500, 2499]
    assert data["items"][0]["charge"]["status"] == "paid"
    assert data["items"][0]["entry"]["status"] == "confirmed"
    assert {item["charge"]["status"] for item in data["items"][1:]} == {"pending"}
    assert {item["entry"]["status"] for item in data["items"][1:]} == {"forecast"}


def test_record_sale_explicit_installments(client: TestClient):
    response = post_sale(
        client,
        amount_cents=10000,
        installment_count=None,
        installments=[
            {"amount_cents": 4000, "due_date": "2099-05-10"},
            {"amount_cents": 6000, "due_date": "2099-06-10T15:30:00Z"},
        ],
    )

    assert response.status_code == 201
    due_dates = [item["charge"]["due_date"] for item in response.json()["items"]]
    assert due_dates == ["2099-05-10", "2099-06-10"]


def test_record_sale_rejects_negative_amount(client: TestClient):
    response = post_sale(client, amount_cents=-100)

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_AMOUNT"


def test_record_sale_rejects_mismatched_installments(client: TestClient):
    response = post_sale(
        client,
        installment_count=None,
        installments=[{"amount_cents": 1000, "due_date": "2099-05-10"}],
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PLAN"


def test_pay_charge_once(client: TestClient):
    """Test POST /v1/charges/{id}/pay succeeds once and then returns 409"""
    second = post_sale(client).json()["items"][1]
    charge_id = second["charge"]["id"]

    response = client.post(
        f"/v1/charges/{charge_id}/pay",
        json={"payment_method": "BOLETO", "payment_date": "2024-02-27"},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "paid"
    assert response.json()["payment_date"] == "2024-02-27"

    response = client.post(f"/v1/charges/{charge_id}/pay", json={"payment_method": "BOLETO"})
    assert response.status_code == 409
    assert response.json()["code"] == "ALREADY_PAID"


def test_pay_unknown_charge(client: TestClient):
    response = client.post(f"/v1/charges/{uuid.uuid4()}/pay", json={"payment_method": "PIX"})

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_get_charge_bad_id(client: TestClient):
    response = client.get("/v1/charges/not-a-uuid")
    assert response.status_code == 400


def test_issue_and_cancel_charge(client: TestClient):
    response = client.post(
        "/v1/charges",
        json={
            "due_date": "2024-07-10",
            "client_id": "client-7",
            "items": [{"description": "Bookkeeping", "quantity": 3, "unit_price_cents": 20000}],
            "discount_cents": 5000,
        },
    )
    assert response.status_code == 201
    charge = response.json()["charge"]
    assert charge["total_cents"] == 55000
    assert response.json()["entry"]["status"] == "forecast"

    response = client.post(f"/v1/charges/{charge['id']}/cancel", json={"reason": "Client left"})
    assert response.status_code == 200
    assert response.json()["status"] == "canceled"

    response = client.post(f"/v1/charges/{charge['id']}/cancel", json={"reason": "Client left"})
    assert response.status_code == 409
    assert response.json()["code"] == "ALREADY_CANCELED"


def test_create_recurring_payable(client: TestClient):
    """Test POST /v1/payables expands a monthly payable into 12 occurrences"""
    response = client.post(
        "/v1/payables",
        json={
            "description": "Office rent",
            "amount_cents": 250000,
            "category": "Rent",
            "due_date": "2024-01-31",
            "cadence": "monthly",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert len(data["occurrences"]) == 12
    assert data["occurrences"][0]["due_date"] == "2024-02-29"
    assert {p["series_id"] for p in data["occurrences"]} == {data["payable"]["id"]}


def test_create_payable_rejects_negative_amount(client: TestClient):
    response = client.post(
        "/v1/payables",
        json={"description": "Refund", "amount_cents": -1, "category": "Other", "due_date": "2024-01-31"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_AMOUNT"


def test_pay_update_and_delete_payable(client: TestClient):
    created = client.post(
        "/v1/payables",
        json={"description": "Printer toner", "amount_cents": 18000, "category": "Supplies", "due_date": "2030-01-10"},
    ).json()["payable"]

    response = client.patch(f"/v1/payables/{created['id']}", json={"amount_cents": 19500})
    assert response.status_code == 200
    assert response.json()["amount_cents"] == 19500

    response = client.post(f"/v1/payables/{created['id']}/pay", json={"payment_date": "2029-12-20"})
    assert response.status_code == 200
    assert response.json()["status"] == "paid"

    response = client.patch(f"/v1/payables/{created['id']}", json={"category": "Office"})
    assert response.status_code == 409
    assert response.json()["code"] == "ALREADY_PAID"

    assert client.delete(f"/v1/payables/{created['id']}").status_code == 409

    totals = client.get("/v1/ledger/totals", params={"direction": "outflow", "status": "confirmed"}).json()
    assert totals["total_cents"] == 19500
    assert totals["formatted"] == "R$ 195,00"


def test_delete_payable_hides_it(client: TestClient):
    created = client.post(
        "/v1/payables",
        json={"description": "Courier", "amount_cents": 3000, "category": "Logistics", "due_date": "2030-03-01"},
    ).json()["payable"]

    assert client.delete(f"/v1/payables/{created['id']}").status_code == 204

    listing = client.get("/v1/payables", params={"category": "Logistics"}).json()
    assert listing["payables"] == []
    response = client.post(f"/v1/payables/{created['id']}/pay", json={})
    assert response.status_code == 404


def test_list_payables_marks_overdue(client: TestClient):
    client.post(
        "/v1/payables",
        json={"description": "Old invoice", "amount_cents": 7000, "category": "Services", "due_date": "2020-01-01"},
    )

    response = client.get("/v1/payables", params={"status": "overdue"})

    assert response.status_code == 200
    payables = response.json()["payables"]
    assert [p["description"] for p in payables] == ["Old invoice"]
    assert "summary" in response.json()

    assert client.post("/v1/payables/sweep").json()["swept"] == 0


def test_balance_endpoint(client: TestClient):
    post_sale(client, mode="single_payment", amount_cents=123456, installment_count=None)

    response = client.get("/v1/ledger/balance")

    assert response.status_code == 200
    assert response.json() == {"balance_cents": 123456, "formatted": "R$ 1.234,56"}


def test_monthly_report_endpoint(client: TestClient):
    client.post(
        "/v1/payables",
        json={"description": "Accountant", "amount_cents": 40000, "category": "Services", "due_date": "2024-03-15"},
    )

    response = client.get("/v1/reports/monthly", params={"year": 2024, "month": 3})

    assert response.status_code == 200
    data = response.json()
    assert data["expenses_total_cents"] == 40000
    assert data["categories"] == [{"category": "Services", "amount_cents": 40000, "percentage": 100.0}]
    assert data["net_result_cents"] == -40000
    assert data["expense_percentage"] == 100.0
    assert data["revenue_percentage"] == 0.0


def test_monthly_report_rejects_bad_month(client: TestClient):
    response = client.get("/v1/reports/monthly", params={"year": 2024, "month": 13})
    assert response.status_code == 422


def test_record_sale_rejects_unordered_installments(client: TestClient):
    response = post_sale(
        client,
        amount_cents=10000,
        installment_count=None,
        installments=[
            {"amount_cents": 5000, "due_date": "2099-05-01"},
            {"amount_cents": 5000, "due_date": "2099-03-01"},
        ],
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PLAN"


def test_record_sale_rejects_past_installments(client: TestClient):
    response = post_sale(
        client,
        amount_cents=10000,
        installment_count=None,
        installments=[
            {"amount_cents": 5000, "due_date": "2020-05-01"},
            {"amount_cents": 5000, "due_date": "2099-03-01"},
        ],
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PLAN"


def test_list_charges_and_entries_for_client(client: TestClient):
    items = post_sale(client, client_id="client-99").json()["items"]
    post_sale(client, client_id="client-1")

    response = client.get("/v1/charges", params={"client_id": "client-99"})
    assert response.status_code == 200
    charges = response.json()["charges"]
    assert [c["id"] for c in charges] == [item["charge"]["id"] for item in items]

    response = client.get("/v1/charges", params={"client_id": "client-99", "status": "pending", "limit": 2})
    assert [c["status"] for c in response.json()["charges"]] == ["pending", "pending"]

    response = client.get("/v1/ledger/entries", params={"charge_id": items[1]["charge"]["id"]})
    assert response.status_code == 200
    entries = response.json()["entries"]
    assert [(e["status"], e["amount_cents"]) for e in entries] == [("forecast", 2500)]


def test_list_entries_rejects_bad_charge_id(client: TestClient):
    response = client.get("/v1/ledger/entries", params={"charge_id": "nope"})
    assert response.status_code == 400
