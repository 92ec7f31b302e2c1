"""Integration tests for loan / investment endpoints"""

import pytest
from fastapi.testclient import TestClient

BASE = "/api/loan-investment"


@pytest.fixture
def loan(client: TestClient, today) -> dict:
    response = client.post(
        f"{BASE}/records",
        json={
            "itemName": "週轉借款",
            "recordType": "loan",
            "partyName": "王小明",
            "principalAmount": "100000",
            "annualInterestRate": "6",
            "monthlyPaymentAmount": "3000",
            "startDate": today.isoformat(),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_loan_is_enriched(loan: dict):
    assert loan["principalAmount"] == "100000.00"
    assert loan["totalPaidAmount"] == "0.00"
    assert loan["riskLevel"] == "low"
    assert loan["isHighRisk"] is False
    assert loan["monthlyInterest"] == "500.00"
    assert loan["remainingPrincipal"] == "100000.00"
    assert loan["status"] == "active"


def test_create_rejects_end_before_start(client: TestClient, today):
    response = client.post(
        f"{BASE}/records",
        json={
            "itemName": "x",
            "recordType": "investment",
            "partyName": "y",
            "principalAmount": "1000",
            "startDate": today.isoformat(),
            "endDate": "2000-01-01",
        },
    )
    assert response.status_code == 400


def test_list_filter_and_delete(client: TestClient, loan: dict, today):
    client.post(
        f"{BASE}/records",
        json={
            "itemName": "民宿合夥",
            "recordType": "investment",
            "partyName": "李大華",
            "principalAmount": "50000",
            "annualInterestRate": "22",
            "startDate": today.isoformat(),
        },
    )

    loans = client.get(f"{BASE}/records", params={"recordType": "loan"}).json()
    assert [r["id"] for r in loans] == [loan["id"]]

    assert client.delete(f"{BASE}/records/{loan['id']}").status_code == 204
    assert client.get(f"{BASE}/records/{loan['id']}").status_code == 404
    assert [r["recordType"] for r in client.get(f"{BASE}/records").json()] == ["investment"]


def test_update_rate_changes_risk(client: TestClient, loan: dict):
    response = client.put(f"{BASE}/records/{loan['id']}", json={"annualInterestRate": "26"})
    assert response.status_code == 200
    assert response.json()["riskLevel"] == "very_high"
    assert response.json()["isHighRisk"] is True


def test_payments_accumulate_and_complete_loan(client: TestClient, loan: dict):
    response = client.post(f"{BASE}/records/{loan['id']}/payments", json={"amount": "40000", "paymentType": "principal"})
    assert response.status_code == 201
    assert response.json()["paymentMethod"] == "bank_transfer"

    record = client.get(f"{BASE}/records/{loan['id']}").json()
    assert record["totalPaidAmount"] == "40000.00"
    assert record["remainingPrincipal"] == "60000.00"
    assert record["status"] == "active"

    client.post(f"{BASE}/records/{loan['id']}/payments", json={"amount": "60000", "paymentType": "principal"})
    record = client.get(f"{BASE}/records/{loan['id']}").json()
    assert record["totalPaidAmount"] == "100000.00"
    assert record["status"] == "completed"

    assert len(client.get(f"{BASE}/records/{loan['id']}/payments").json()) == 2


def test_payment_must_be_positive(client: TestClient, loan: dict):
    response = client.post(f"{BASE}/records/{loan['id']}/payments", json={"amount": "0"})
    assert response.status_code == 400


def test_schedule(client: TestClient, loan: dict):
    response = client.get(f"{BASE}/records/{loan['id']}/schedule", params={"periods": 3})
    assert response.status_code == 200
    body = response.json()
    assert body["outcome"] == "paid_off"
    assert body["totalPeriods"] == 37
    assert [e["period"] for e in body["entries"]] == [1, 2, 3]
    assert body["entries"][0] == {
        "period": 1,
        "principalPortion": "2500.00",
        "interestPortion": "500.00",
        "payment": "3000.00",
        "remainingBalance": "97500.00",
    }


def test_schedule_requires_monthly_payment(client: TestClient, today):
    record = client.post(
        f"{BASE}/records",
        json={
            "itemName": "x",
            "recordType": "investment",
            "partyName": "y",
            "principalAmount": "1000",
            "startDate": today.isoformat(),
        },
    ).json()
    assert client.get(f"{BASE}/records/{record['id']}/schedule").status_code == 400


def test_calculate_with_term(client: TestClient):
    response = client.post(
        f"{BASE}/calculate",
        json={"principal": "100000", "annualInterestRate": "12", "termMonths": 12, "periods": 2},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["monthlyPayment"] == "8884.88"
    assert body["monthlyInterest"] == "1000.00"
    assert body["totalPeriods"] == 12
    assert body["outcome"] == "paid_off"
    assert len(body["schedule"]) == 2
    assert body["riskLevel"] == "medium"


def test_calculate_payment_too_low(client: TestClient):
    response = client.post(
        f"{BASE}/calculate",
        json={"principal": "100000", "annualInterestRate": "24", "monthlyPayment": "2000"},
    )
    assert response.status_code == 200
    assert response.json()["outcome"] == "payment_too_low"
    assert response.json()["schedule"] == []


def test_calculate_requires_payment_or_term(client: TestClient):
    response = client.post(f"{BASE}/calculate", json={"principal": "1000", "annualInterestRate": "5"})
    assert response.status_code == 400


def test_stats(client: TestClient, loan: dict, today):
    client.post(
        f"{BASE}/records",
        json={
            "itemName": "高利投資",
            "recordType": "investment",
            "partyName": "z",
            "principalAmount": "20000",
            "annualInterestRate": "18",
            "startDate": today.isoformat(),
        },
    )

    stats = client.get(f"{BASE}/stats").json()
    assert stats["totalLoanAmount"] == "100000.00"
    assert stats["activeLoanAmount"] == "100000.00"
    assert stats["totalInvestmentAmount"] == "20000.00"
    # 500 + 300 per month
    assert stats["monthlyInterest"] == "800.00"
    assert stats["yearlyInterest"] == "9600.00"
    assert stats["highRiskCount"] == 1
    assert stats["activeCount"] == 2
