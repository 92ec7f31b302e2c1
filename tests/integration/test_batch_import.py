"""Integration tests for batch import"""

from fastapi.testclient import TestClient

CSV_CONTENT = (
    "項目名稱,金額,日期,專案,分類,廠商,付款狀態\n"
    "水電工程,\"12,500\",2024/03/05,浯島文旅,工程,大同水電,已付款\n"
    "冷氣維修,3000,2024-03-10,新專案,,,\n"
    "壞資料,-5,2024-03-10,浯島文旅,,,\n"
).encode("utf-8-sig")


def test_preview(client: TestClient):
    response = client.post(
        "/api/payment/batch-import/preview",
        files={"file": ("payments.csv", CSV_CONTENT, "text/csv")},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["totalRecords"] == 3
    assert body["validRecords"] == 2
    assert body["invalidRecords"] == 1
    assert body["records"][0]["amount"] == "12500.00"
    assert body["records"][0]["date"] == "2024-03-05"
    assert body["records"][2]["errors"] == ["金額必須大於 0"]

    # Preview writes nothing
    assert client.get("/api/payment/items", params={"includeAll": "true"}).json() == []


def test_preview_rejects_unknown_format(client: TestClient):
    response = client.post(
        "/api/payment/batch-import/preview",
        files={"file": ("payments.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400


def test_execute_import(client: TestClient):
    records = client.post(
        "/api/payment/batch-import/preview",
        files={"file": ("payments.csv", CSV_CONTENT, "text/csv")},
    ).json()["records"]

    response = client.post("/api/payment/batch-import/execute", json={"records": records})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] == 2
    assert body["failed"] == 1

    paid_row, unpaid_row, bad_row = body["details"]
    assert paid_row["success"] and paid_row["paymentId"] is not None
    assert unpaid_row["success"] and unpaid_row["paymentId"] is None
    assert not bad_row["success"] and bad_row["error"] == "金額必須大於 0"

    items = {i["itemName"]: i for i in client.get("/api/payment/items", params={"includeAll": "true"}).json()}
    assert set(items) == {"水電工程", "冷氣維修"}
    assert items["水電工程"]["status"] == "paid"
    assert items["水電工程"]["source"] == "batch_import"
    assert "大同水電" in items["水電工程"]["notes"]
    assert items["冷氣維修"]["projectName"] == "新專案"

    projects = [p["projectName"] for p in client.get("/api/payment/projects").json()]
    assert sorted(projects) == sorted(["浯島文旅", "新專案"])


def test_execute_reuses_existing_project(client: TestClient, project: dict):
    record = {
        "itemName": "網路費",
        "amount": "899",
        "date": "2024-04-01",
        "projectName": project["projectName"],
    }
    body = client.post("/api/payment/batch-import/execute", json={"records": [record]}).json()

    assert body["success"] == 1
    item = client.get(f"/api/payment/items/{body['details'][0]['itemId']}").json()
    assert item["projectId"] == project["id"]
    assert len(client.get("/api/payment/projects").json()) == 1


def test_execute_requires_records(client: TestClient):
    assert client.post("/api/payment/batch-import/execute", json={"records": []}).status_code == 400
