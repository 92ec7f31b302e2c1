"""Integration tests for payment item endpoints"""

from datetime import timedelta
from fastapi.testclient import TestClient


def test_create_item(client: TestClient, make_item, project: dict):
    item = make_item(total="1000", priority=2, notes="一樓")

    assert item["totalAmount"] == "1000.00"
    assert item["paidAmount"] == "0.00"
    assert item["remainingAmount"] == "1000.00"
    assert item["status"] == "pending"
    assert item["projectName"] == project["projectName"]
    assert item["source"] == "manual"


def test_create_item_in_the_past_is_overdue(make_item, today):
    item = make_item(start=today - timedelta(days=5))
    assert item["status"] == "overdue"


def test_create_item_validation(client: TestClient, today):
    response = client.post(
        "/api/payment/items",
        json={"itemName": "x", "totalAmount": "0", "startDate": today.isoformat()},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Invalid request data"
    assert body["errors"]


def test_create_item_end_before_start(client: TestClient, today):
    response = client.post(
        "/api/payment/items",
        json={
            "itemName": "x",
            "totalAmount": "100",
            "startDate": today.isoformat(),
            "endDate": (today - timedelta(days=1)).isoformat(),
        },
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "endDate"


def test_create_item_unknown_project(client: TestClient, today):
    response = client.post(
        "/api/payment/items",
        json={"itemName": "x", "totalAmount": "100", "startDate": today.isoformat(), "projectId": 999},
    )
    assert response.status_code == 400


def test_get_missing_item(client: TestClient):
    response = client.get("/api/payment/items/999")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_list_items_paginates(client: TestClient, make_item):
    for n in range(5):
        make_item(item_name=f"項目{n}")

    response = client.get("/api/payment/items", params={"limit": 2, "page": 3})
    assert response.status_code == 200
    body = response.json()
    assert len(body["items"]) == 1
    assert body["pagination"]["totalItems"] == 5
    assert body["pagination"]["totalPages"] == 3
    assert body["pagination"]["hasNextPage"] is False
    assert body["pagination"]["hasPreviousPage"] is True


def test_list_items_search_and_sort(client: TestClient, make_item):
    make_item(item_name="冷氣維修", total="300")
    make_item(item_name="冷氣安裝", total="900")
    make_item(item_name="網路費", total="100")

    response = client.get(
        "/api/payment/items",
        params={"search": "冷氣", "sortBy": "amount", "sortOrder": "desc", "includeAll": "true"},
    )
    assert response.status_code == 200
    assert [i["itemName"] for i in response.json()] == ["冷氣安裝", "冷氣維修"]


def test_list_items_rejects_unknown_sort(client: TestClient):
    response = client.get("/api/payment/items", params={"sortBy": "colour"})
    assert response.status_code == 400


def test_update_item_writes_audit_log(client: TestClient, make_item, today):
    item = make_item(total="1000")

    response = client.put(
        f"/api/payment/items/{item['id']}",
        json={
            "itemName": item["itemName"],
            "totalAmount": "1500",
            "startDate": item["startDate"],
            "projectId": item["projectId"],
            "changeReason": "追加工程",
        },
    )
    assert response.status_code == 200
    assert response.json()["totalAmount"] == "1500.00"

    logs = client.get(f"/api/payment/items/{item['id']}/audit-logs").json()
    assert [log["action"] for log in logs] == ["UPDATE", "INSERT"]
    assert logs[0]["changeReason"] == "追加工程"
    assert "total_amount" in logs[0]["changedFields"]


def test_patch_item_merges_fields(client: TestClient, make_item):
    item = make_item(total="1000", notes="原始")

    response = client.patch(f"/api/payment/items/{item['id']}", json={"priority": 3})
    assert response.status_code == 200
    body = response.json()
    assert body["priority"] == 3
    assert body["notes"] == "原始"
    assert body["totalAmount"] == "1000.00"


def test_patch_item_rejects_invalid_merge(client: TestClient, make_item):
    item = make_item()
    response = client.patch(f"/api/payment/items/{item['id']}", json={"priority": 9})
    assert response.status_code == 400


def test_soft_delete_and_restore(client: TestClient, make_item):
    item = make_item()

    assert client.delete(f"/api/payment/items/{item['id']}").status_code == 204
    assert client.get(f"/api/payment/items/{item['id']}").status_code == 404
    assert client.get("/api/payment/items", params={"includeAll": "true"}).json() == []

    deleted = client.get("/api/payment/items/deleted").json()
    assert [d["id"] for d in deleted] == [item["id"]]

    response = client.post(f"/api/payment/items/{item['id']}/restore")
    assert response.status_code == 200
    assert response.json()["isDeleted"] is False

    # Restoring a live item is a conflict
    assert client.post(f"/api/payment/items/{item['id']}/restore").status_code == 409

    actions = [log["action"] for log in client.get(f"/api/payment/items/{item['id']}/audit-logs").json()]
    assert actions == ["RESTORE", "DELETE", "INSERT"]


def test_permanent_delete(client: TestClient, make_item):
    item = make_item()

    assert client.delete(f"/api/payment/items/{item['id']}/permanent").status_code == 204
    assert client.get("/api/payment/items/deleted").json() == []
    assert client.post(f"/api/payment/items/{item['id']}/restore").status_code == 404


def test_projects_and_categories(client: TestClient, project: dict):
    assert [p["projectName"] for p in client.get("/api/payment/projects").json()] == [project["projectName"]]

    response = client.post("/api/categories", json={"categoryName": "工程", "categoryType": "project"})
    assert response.status_code == 201

    categories = client.get("/api/categories", params={"categoryType": "project"}).json()
    assert [c["categoryName"] for c in categories] == ["工程"]
    assert client.get("/api/categories", params={"categoryType": "home"}).json() == []
