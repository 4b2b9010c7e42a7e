"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient

USER = {"X-User-ID": "user_1"}
OTHER_USER = {"X-User-ID": "user_2"}

LOAN_BODY = {
    "name": "Motorbike",
    "principal": 12_000_000,
    "term_months": 12,
    "start_date": "2024-01-01",
    "due_day": 25,
    "type": "vehicle",
    "lender": "Bank Mandiri",
}


@pytest.fixture
def loan(client: TestClient) -> dict:
    response = client.post("/v1/loans", json=LOAN_BODY, headers=USER)
    assert response.status_code == 201
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, loan: dict):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "pocket_ledger_loans_created_total" in response.text
    assert "http_request_duration_seconds" in response.text


def test_request_id_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_user_header_required(client: TestClient):
    assert client.get("/v1/loans").status_code == 422


def test_create_loan(loan: dict):
    assert loan["loan"]["total_amount"] == 12_000_000
    assert loan["loan"]["type"] == "vehicle"
    assert loan["loan"]["status"] == "active"
    assert len(loan["schedules"]) == 12
    assert loan["schedules"][0]["due_date"] == "2024-01-25"
    assert loan["schedules"][0]["amount"] == 1_000_000


def test_create_loan_invalid_terms(client: TestClient):
    response = client.post("/v1/loans", json={**LOAN_BODY, "term_months": 0}, headers=USER)

    assert response.status_code == 422
    assert response.json()["detail"] == "Term must be at least one month"
    assert client.get("/v1/loans", headers=USER).json()["total"] == 0


@pytest.mark.parametrize("changes", [{"term_months": 10_000}, {"interest_rate": -1}, {"interest_rate": "NaN"}])
def test_create_loan_rejects_out_of_range_terms(client: TestClient, changes):
    response = client.post("/v1/loans", json={**LOAN_BODY, **changes}, headers=USER)

    assert response.status_code == 422
    assert client.get("/v1/loans", headers=USER).json()["total"] == 0


def test_get_loan_detail(client: TestClient, loan: dict):
    response = client.get(f"/v1/loans/{loan['loan']['id']}", headers=USER)

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["status"] == "overdue"  # Jan and Feb unpaid on 2024-03-10
    assert data["loan"]["status"] == "active"
    assert data["schedules"][0]["status"] == "overdue"
    assert data["schedules"][2]["status"] == "due_soon"
    assert data["schedules"][3]["status"] == "pending"


def test_loans_are_scoped_per_user(client: TestClient, loan: dict):
    assert client.get(f"/v1/loans/{loan['loan']['id']}", headers=OTHER_USER).status_code == 404
    assert client.get("/v1/loans", headers=OTHER_USER).json()["items"] == []


def test_pay_schedule(client: TestClient, loan: dict):
    loan_id = loan["loan"]["id"]
    schedule_id = loan["schedules"][0]["id"]

    response = client.post(
        f"/v1/loans/{loan_id}/schedules/{schedule_id}/pay",
        json={"method": "transfer", "note": "paid from app"},
        headers=USER,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["loan"]["paid_amount"] == 1_000_000
    assert data["loan"]["remaining_amount"] == 11_000_000
    assert data["schedule"]["paid"] is True

    payments = client.get("/v1/loans/payments", params={"loan_id": loan_id}, headers=USER).json()["payments"]
    assert len(payments) == 1
    assert payments[0]["method"] == "transfer"


def test_pay_schedule_twice_conflicts(client: TestClient, loan: dict):
    url = f"/v1/loans/{loan['loan']['id']}/schedules/{loan['schedules'][0]['id']}/pay"
    assert client.post(url, headers=USER).status_code == 200

    response = client.post(url, headers=USER)

    assert response.status_code == 409
    assert "already paid" in response.json()["detail"]


def test_pay_unknown_schedule(client: TestClient, loan: dict):
    response = client.post(f"/v1/loans/{loan['loan']['id']}/schedules/missing/pay", headers=USER)
    assert response.status_code == 404


def test_edit_schedule_amount(client: TestClient, loan: dict):
    url = f"/v1/loans/{loan['loan']['id']}/schedules/{loan['schedules'][1]['id']}"

    response = client.patch(url, json={"amount": 1_234_567}, headers=USER)

    assert response.status_code == 200
    schedule = response.json()["schedule"]
    assert schedule["amount"] == 1_234_567
    assert schedule["principal"] + schedule["interest"] == 1_234_567
    assert response.json()["loan"]["total_amount"] == 12_234_567

    rejected = client.patch(url, json={"amount": 0}, headers=USER)
    assert rejected.status_code == 422
    assert rejected.json()["detail"] == "Installment amount must be a positive number"


def test_edit_all_schedules(client: TestClient, loan: dict):
    schedules = loan["schedules"]
    response = client.put(
        f"/v1/loans/{loan['loan']['id']}/schedules",
        json={"amounts": {schedules[10]["id"]: 1_500_000, schedules[11]["id"]: 500_000}},
        headers=USER,
    )

    assert response.status_code == 200
    assert response.json()["loan"]["total_amount"] == 12_000_000
    assert [s["amount"] for s in response.json()["schedules"][-2:]] == [1_500_000, 500_000]


def test_update_loan(client: TestClient, loan: dict):
    response = client.patch(f"/v1/loans/{loan['loan']['id']}", json={"name": "Scooter", "notes": "0% promo"}, headers=USER)

    assert response.status_code == 200
    assert response.json()["name"] == "Scooter"
    assert response.json()["notes"] == "0% promo"
    assert response.json()["total_amount"] == 12_000_000


def test_delete_loan(client: TestClient, loan: dict):
    loan_id = loan["loan"]["id"]

    response = client.delete(f"/v1/loans/{loan_id}", headers=USER)

    assert response.status_code == 200
    assert response.json()["schedules_removed"] == 12
    assert client.get(f"/v1/loans/{loan_id}", headers=USER).status_code == 404
    assert client.delete(f"/v1/loans/{loan_id}", headers=USER).status_code == 404


def test_list_loans_filters(client: TestClient, loan: dict):
    client.post("/v1/loans", json={**LOAN_BODY, "name": "House", "type": "mortgage", "lender": "BTN"}, headers=USER)

    assert client.get("/v1/loans", headers=USER).json()["total"] == 2
    assert [i["loan"]["name"] for i in client.get("/v1/loans", params={"q": "btn"}, headers=USER).json()["items"]] == ["House"]
    assert client.get("/v1/loans", params={"type": "vehicle"}, headers=USER).json()["total"] == 1
    page = client.get("/v1/loans", params={"per_page": 1, "page": 2}, headers=USER).json()
    assert page["total_pages"] == 2
    assert len(page["items"]) == 1


def test_list_loans_overdue_filter(client: TestClient, loan: dict):
    later = {**LOAN_BODY, "name": "Laptop", "start_date": "2024-03-01"}
    client.post("/v1/loans", json=later, headers=USER)

    overdue = client.get("/v1/loans", params={"status": "overdue"}, headers=USER).json()

    assert overdue["total"] == 1
    assert overdue["items"][0]["loan"]["name"] == "Motorbike"
    assert overdue["items"][0]["summary"]["status"] == "overdue"


def test_portfolio_stats(client: TestClient, loan: dict):
    response = client.get("/v1/loans/stats", headers=USER)

    assert response.status_code == 200
    stats = response.json()
    assert stats["total_active_loans"] == 1
    assert stats["total_remaining"] == 12_000_000
    assert stats["overdue_loans"] == 1
    assert stats["total_this_month"] == 1_000_000
    assert [item["schedule"]["month"] for item in stats["overdue_schedules"]] == ["2024-01", "2024-02"]
    assert stats["due_soon"][0]["days_left"] == 15


def test_reminders_endpoint(client: TestClient, loan: dict):
    # 2024-03-10 is 15 days before the March due date: nothing to send
    response = client.get("/v1/loans/reminders", headers=USER)

    assert response.status_code == 200
    assert response.json()["reminders"] == []


def test_budget_flow(client: TestClient):
    wallet = client.post("/v1/wallets", json={"name": "Cash", "balance": 2_000_000}, headers=USER).json()
    food = client.post("/v1/categories", json={"name": "Food", "type": "expense"}, headers=USER).json()

    budget = client.post("/v1/budgets", json={"category_id": food["id"], "limit": 1_000_000}, headers=USER)
    assert budget.status_code == 201

    duplicate = client.post("/v1/budgets", json={"category_id": food["id"], "limit": 5}, headers=USER)
    assert duplicate.status_code == 409

    tx = client.post(
        "/v1/transactions",
        json={"type": "expense", "amount": 950_000, "wallet_id": wallet["id"], "date": "2024-03-05", "category_id": food["id"]},
        headers=USER,
    )
    assert tx.status_code == 201

    overview = client.get("/v1/budgets", params={"month": "2024-03"}, headers=USER).json()
    assert overview["items"][0]["status"] == "danger"
    assert overview["items"][0]["percent"] == 95
    assert overview["status_counts"]["danger"] == 1

    wallets = client.get("/v1/wallets", headers=USER).json()
    assert wallets[0]["balance"] == 1_050_000

    assert client.delete(f"/v1/transactions/{tx.json()['id']}", headers=USER).status_code == 204
    assert client.get("/v1/wallets", headers=USER).json()[0]["balance"] == 2_000_000


def test_budget_invalid_limit(client: TestClient):
    food = client.post("/v1/categories", json={"name": "Food", "type": "expense"}, headers=USER).json()

    response = client.post("/v1/budgets", json={"category_id": food["id"], "limit": 0}, headers=USER)

    assert response.status_code == 422
    assert response.json()["detail"] == "Budget limit must be greater than zero"


def test_budget_update_and_delete(client: TestClient):
    food = client.post("/v1/categories", json={"name": "Food", "type": "expense"}, headers=USER).json()
    budget = client.post("/v1/budgets", json={"category_id": food["id"], "limit": 1_000}, headers=USER).json()

    updated = client.patch(f"/v1/budgets/{budget['id']}", json={"limit": 2_000}, headers=USER)
    assert updated.json()["limit"] == 2_000

    assert client.delete(f"/v1/budgets/{budget['id']}", headers=USER).status_code == 204
    assert client.patch(f"/v1/budgets/{budget['id']}", json={"limit": 5}, headers=USER).status_code == 404


def test_transfer_between_wallets(client: TestClient):
    cash = client.post("/v1/wallets", json={"name": "Cash", "balance": 100_000}, headers=USER).json()
    bank = client.post("/v1/wallets", json={"name": "BCA", "type": "bank", "balance": 1_000_000}, headers=USER).json()

    response = client.post(
        "/v1/transactions",
        json={"type": "transfer", "amount": 200_000, "fee": 6_500, "wallet_id": bank["id"], "to_wallet_id": cash["id"], "date": "2024-03-01"},
        headers=USER,
    )

    assert response.status_code == 201
    balances = {w["name"]: w["balance"] for w in client.get("/v1/wallets", headers=USER).json()}
    assert balances == {"Cash": 300_000, "BCA": 793_500}


def test_financial_health(client: TestClient, loan: dict):
    bank = client.post("/v1/wallets", json={"name": "BCA", "type": "bank"}, headers=USER).json()
    salary = client.post("/v1/categories", json={"name": "Salary", "type": "income"}, headers=USER).json()
    food = client.post("/v1/categories", json={"name": "Food", "type": "expense"}, headers=USER).json()
    for body in (
        {"type": "income", "amount": 10_000_000, "category_id": salary["id"]},
        {"type": "expense", "amount": 4_000_000, "category_id": food["id"]},
    ):
        client.post("/v1/transactions", json={**body, "wallet_id": bank["id"], "date": "2024-03-02"}, headers=USER)

    response = client.get("/v1/financial-health", params={"month": "2024-03"}, headers=USER)

    assert response.status_code == 200
    report = response.json()
    assert report["score"] == 100
    assert report["label"] == "Excellent"
    assert report["factors"]["debt_this_month"] == 1_000_000
    assert report["factors"]["expense_by_category"][0]["category_name"] == "Food"
    assert 1 <= len(report["recommendations"]) <= 3


def test_financial_health_invalid_month(client: TestClient):
    response = client.get("/v1/financial-health", params={"month": "2024-13"}, headers=USER)
    assert response.status_code == 422


def test_update_and_delete_wallet(client: TestClient):
    cash = client.post("/v1/wallets", json={"name": "Cash", "balance": 100_000}, headers=USER).json()

    response = client.patch(f"/v1/wallets/{cash['id']}", json={"name": "Pocket", "balance": 9}, headers=USER)
    assert response.status_code == 200
    assert response.json()["name"] == "Pocket"
    assert response.json()["balance"] == 100_000

    assert client.patch(f"/v1/wallets/{cash['id']}", json={"name": ""}, headers=USER).status_code == 422
    assert client.delete(f"/v1/wallets/{cash['id']}", headers=USER).status_code == 204
    assert client.get("/v1/wallets", headers=USER).json() == []
    assert client.delete(f"/v1/wallets/{cash['id']}", headers=USER).status_code == 404


def test_update_and_delete_category(client: TestClient):
    food = client.post("/v1/categories", json={"name": "Food", "type": "expense"}, headers=USER).json()
    client.post("/v1/budgets", json={"category_id": food["id"], "limit": 1_000}, headers=USER)

    renamed = client.patch(f"/v1/categories/{food['id']}", json={"name": "Groceries"}, headers=USER)
    assert renamed.json()["name"] == "Groceries"

    retyped = client.patch(f"/v1/categories/{food['id']}", json={"type": "income"}, headers=USER)
    assert retyped.status_code == 422

    assert client.delete(f"/v1/categories/{food['id']}", headers=USER).status_code == 204
    assert client.get("/v1/budgets", params={"month": "2024-03"}, headers=USER).json()["items"] == []


def test_replace_transaction(client: TestClient):
    cash = client.post("/v1/wallets", json={"name": "Cash", "balance": 100_000}, headers=USER).json()
    bank = client.post("/v1/wallets", json={"name": "BCA", "type": "bank", "balance": 1_000_000}, headers=USER).json()
    food = client.post("/v1/categories", json={"name": "Food", "type": "expense"}, headers=USER).json()
    body = {"type": "expense", "amount": 30_000, "wallet_id": cash["id"], "date": "2024-03-05", "category_id": food["id"]}
    tx = client.post("/v1/transactions", json=body, headers=USER).json()

    response = client.put(f"/v1/transactions/{tx['id']}", json={**body, "amount": 50_000, "wallet_id": bank["id"]}, headers=USER)

    assert response.status_code == 200
    assert response.json()["amount"] == 50_000
    balances = {w["name"]: w["balance"] for w in client.get("/v1/wallets", headers=USER).json()}
    assert balances == {"Cash": 100_000, "BCA": 950_000}
    assert client.put("/v1/transactions/missing", json=body, headers=USER).status_code == 404


def test_dashboard_endpoint(client: TestClient):
    bank = client.post("/v1/wallets", json={"name": "BCA", "type": "bank", "balance": 1_000_000}, headers=USER).json()
    food = client.post("/v1/categories", json={"name": "Food", "type": "expense"}, headers=USER).json()
    client.post("/v1/budgets", json={"category_id": food["id"], "limit": 500_000}, headers=USER)
    client.post(
        "/v1/transactions",
        json={"type": "expense", "amount": 400_000, "wallet_id": bank["id"], "date": "2024-03-02", "category_id": food["id"]},
        headers=USER,
    )

    response = client.get("/v1/dashboard", headers=USER)

    assert response.status_code == 200
    summary = response.json()
    assert summary["month"] == "2024-03"
    assert summary["total_balance"] == 600_000
    assert summary["cash_flow"] == -400_000
    assert len(summary["monthly_trend"]) == 6
    assert summary["top_categories"] == [{"category_id": food["id"], "category_name": "Food", "amount": 400_000}]
    assert summary["budget_warnings"][0]["status"] == "warning"
    assert client.get("/v1/dashboard", params={"month": "2024-13"}, headers=USER).status_code == 422
