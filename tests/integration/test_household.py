"""Integration tests for the household ledger"""

import pytest
from fastapi.testclient import TestClient

BASE = "/api/household"


@pytest.fixture
def food(client: TestClient) -> dict:
    response = client.post(f"{BASE}/categories", json={"categoryName": "餐飲", "color": "#ff8800"})
    assert response.status_code == 201
    return response.json()


def add_expense(client: TestClient, **fields) -> dict:
    response = client.post(f"{BASE}/expenses", json=fields)
    assert response.status_code == 201, response.text
    return response.json()


def test_categories(client: TestClient, food: dict):
    assert [c["categoryName"] for c in client.get(f"{BASE}/categories").json()] == ["餐飲"]

    response = client.put(f"{BASE}/categories/{food['id']}", json={"color": "#000000"})
    assert response.json()["color"] == "#000000"

    assert client.delete(f"{BASE}/categories/{food['id']}").status_code == 204
    assert client.get(f"{BASE}/categories").json() == []
    assert len(client.get(f"{BASE}/categories", params={"includeInactive": "true"}).json()) == 1


def test_budget_upsert_replaces_amount(client: TestClient, food: dict):
    body = {"categoryId": food["id"], "year": 2024, "month": 5, "budgetAmount": "8000"}
    first = client.post(f"{BASE}/budgets", json=body).json()
    second = client.post(f"{BASE}/budgets", json={**body, "budgetAmount": "9000"}).json()

    assert first["id"] == second["id"]
    budgets = client.get(f"{BASE}/budgets", params={"year": 2024, "month": 5}).json()
    assert [b["budgetAmount"] for b in budgets] == ["9000.00"]


def test_budget_for_unknown_category(client: TestClient):
    response = client.post(f"{BASE}/budgets", json={"categoryId": 99, "year": 2024, "month": 5, "budgetAmount": "1"})
    assert response.status_code == 404


def test_expense_crud(client: TestClient, food: dict):
    expense = add_expense(client, categoryId=food["id"], amount="350", date="2024-05-03", tags=["午餐"])
    assert expense["amount"] == "350.00"
    assert expense["tags"] == ["午餐"]

    response = client.put(f"{BASE}/expenses/{expense['id']}", json={"amount": "420.5", "description": "聚餐"})
    assert response.status_code == 200
    assert response.json()["amount"] == "420.50"
    assert response.json()["description"] == "聚餐"

    assert client.delete(f"{BASE}/expenses/{expense['id']}").status_code == 204
    assert client.get(f"{BASE}/expenses/{expense['id']}").status_code == 404


def test_list_expenses_by_month(client: TestClient, food: dict):
    add_expense(client, categoryId=food["id"], amount="100", date="2024-05-01")
    add_expense(client, categoryId=food["id"], amount="200", date="2024-05-31")
    add_expense(client, categoryId=food["id"], amount="300", date="2024-06-01")

    body = client.get(f"{BASE}/expenses", params={"year": 2024, "month": 5}).json()
    assert [e["amount"] for e in body["items"]] == ["200.00", "100.00"]
    assert body["pagination"]["totalItems"] == 2

    body = client.get(f"{BASE}/expenses", params={"year": 2024}).json()
    assert body["pagination"]["totalItems"] == 3


def test_category_stats(client: TestClient, food: dict):
    client.post(f"{BASE}/budgets", json={"categoryId": food["id"], "year": 2024, "month": 5, "budgetAmount": "1000"})
    add_expense(client, categoryId=food["id"], amount="300", date="2024-05-10")
    add_expense(client, categoryId=food["id"], amount="450", date="2024-05-20")

    stats = client.get(f"{BASE}/categories/{food['id']}/stats", params={"year": 2024, "month": 5}).json()
    assert stats["budget"] == "1000.00"
    assert stats["totalExpenses"] == "750.00"
    assert stats["remaining"] == "250.00"
    assert stats["expenseCount"] == 2


def test_month_summary(client: TestClient, food: dict):
    transport = client.post(f"{BASE}/categories", json={"categoryName": "交通"}).json()
    client.post(f"{BASE}/budgets", json={"categoryId": food["id"], "year": 2024, "month": 5, "budgetAmount": "1000"})
    client.post(f"{BASE}/budgets", json={"categoryId": transport["id"], "year": 2024, "month": 5, "budgetAmount": "500"})
    add_expense(client, categoryId=food["id"], amount="1200", date="2024-05-10")
    add_expense(client, amount="80", date="2024-05-11")

    summary = client.get(f"{BASE}/stats", params={"year": 2024, "month": 5}).json()
    assert summary["totalBudget"] == "1500.00"
    assert summary["totalExpenses"] == "1280.00"
    assert summary["remaining"] == "220.00"

    by_name = {c["categoryName"]: c for c in summary["categories"]}
    assert by_name["餐飲"]["remaining"] == "-200.00"
    assert by_name["交通"]["totalExpenses"] == "0.00"
    assert by_name["未分類"]["totalExpenses"] == "80.00"
