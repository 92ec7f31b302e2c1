"""Integration tests for budget plans and budget item conversion"""

import pytest
from datetime import timedelta
from fastapi.testclient import TestClient

BASE = "/api/budget"


@pytest.fixture
def plan(client: TestClient, project: dict, today) -> dict:
    response = client.post(
        f"{BASE}/plans",
        json={
            "planName": "二期裝修",
            "projectId": project["id"],
            "startDate": today.isoformat(),
            "endDate": (today + timedelta(days=90)).isoformat(),
            "totalBudget": "300000",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def add_item(client: TestClient, plan_id: int, **fields) -> dict:
    body = {"itemName": "地板", "plannedAmount": "80000", **fields}
    response = client.post(f"{BASE}/plans/{plan_id}/items", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_plan(plan: dict):
    assert plan["totalBudget"] == "300000.00"
    assert plan["actualSpent"] == "0.00"
    assert plan["items"] == []


def test_plan_dates_validated(client: TestClient, today):
    response = client.post(
        f"{BASE}/plans",
        json={
            "planName": "x",
            "startDate": today.isoformat(),
            "endDate": (today - timedelta(days=1)).isoformat(),
        },
    )
    assert response.status_code == 400


def test_actual_spent_follows_items(client: TestClient, plan: dict):
    first = add_item(client, plan["id"], actualAmount="50000")
    add_item(client, plan["id"], itemName="油漆", plannedAmount="20000", actualAmount="15000")

    body = client.get(f"{BASE}/plans/{plan['id']}").json()
    assert body["actualSpent"] == "65000.00"
    assert len(body["items"]) == 2

    client.put(f"{BASE}/items/{first['id']}", json={"actualAmount": "55000"})
    assert client.get(f"{BASE}/plans/{plan['id']}").json()["actualSpent"] == "70000.00"

    assert client.delete(f"{BASE}/items/{first['id']}").status_code == 204
    body = client.get(f"{BASE}/plans/{plan['id']}").json()
    assert body["actualSpent"] == "15000.00"
    assert [i["itemName"] for i in body["items"]] == ["油漆"]


def test_update_and_delete_plan(client: TestClient, plan: dict):
    response = client.put(f"{BASE}/plans/{plan['id']}", json={"status": "completed"})
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    assert client.delete(f"{BASE}/plans/{plan['id']}").status_code == 204
    assert client.get(f"{BASE}/plans/{plan['id']}").status_code == 404
    assert client.get(f"{BASE}/plans").json() == []


def test_convert_budget_item(client: TestClient, plan: dict, project: dict, today):
    item = add_item(
        client,
        plan["id"],
        startDate=(today + timedelta(days=7)).isoformat(),
        notes="含施工",
        priority=2,
    )

    response = client.post(f"{BASE}/items/{item['id']}/convert")
    assert response.status_code == 201
    body = response.json()

    payment_item = body["paymentItem"]
    assert payment_item["itemName"] == "地板"
    assert payment_item["totalAmount"] == "80000.00"
    assert payment_item["projectId"] == project["id"]
    assert payment_item["notes"] == "[預算轉換] 含施工"
    assert payment_item["priority"] == 2
    assert payment_item["status"] == "pending"

    budget_item = body["budgetItem"]
    assert budget_item["convertedToPayment"] is True
    assert budget_item["linkedPaymentItemId"] == payment_item["id"]
    assert budget_item["conversionDate"] is not None

    assert client.get(f"/api/payment/items/{payment_item['id']}").status_code == 200


def test_convert_twice_is_conflict(client: TestClient, plan: dict):
    item = add_item(client, plan["id"])

    assert client.post(f"{BASE}/items/{item['id']}/convert").status_code == 201
    response = client.post(f"{BASE}/items/{item['id']}/convert")
    assert response.status_code == 409
    assert response.json()["success"] is False

    # Only one payment item was created
    items = client.get("/api/payment/items", params={"includeAll": "true"}).json()
    assert len(items) == 1


def test_convert_installment_item(client: TestClient, plan: dict):
    item = add_item(
        client,
        plan["id"],
        paymentType="installment",
        installmentCount=4,
        installmentAmount="20000",
    )

    payment_item = client.post(f"{BASE}/items/{item['id']}/convert").json()["paymentItem"]
    assert payment_item["paymentType"] == "installment"
    assert payment_item["installmentCount"] == 4
    assert payment_item["installmentAmount"] == "20000.00"
    assert payment_item["notes"] == "[預算轉換項目]"


def test_convert_missing_item(client: TestClient):
    assert client.post(f"{BASE}/items/999/convert").status_code == 404
