"""
任务、工单、服务目录、房型、楼栋 API 测试
"""
from decimal import Decimal

from fastapi.testclient import TestClient


def _task(client, title="打扫 A101", assignee="王阿姨", **extra):
    response = client.post("/tasks", json={"title": title, "assignee": assignee, **extra})
    assert response.status_code == 200, response.text
    return response.json()


class TestTasksApi:
    """任务管理"""

    def test_create_defaults(self, client: TestClient):
        task = _task(client, dueDate="2025-01-02")
        assert task["status"] == "todo"
        assert task["priority"] == "medium"
        assert task["dueDate"] == "2025-01-02"

    def test_done_to_in_progress_rejected(self, client: TestClient):
        task = _task(client)
        assert client.post(f"/tasks/{task['id']}/status", json={"status": "in_progress"}).status_code == 200
        assert client.post(f"/tasks/{task['id']}/status", json={"status": "done"}).status_code == 200
        response = client.post(f"/tasks/{task['id']}/status", json={"status": "in_progress"})
        assert response.status_code == 409
        assert response.headers["X-Error-Code"] == "invalid_transition"

    def test_unknown_status_value(self, client: TestClient):
        task = _task(client)
        response = client.post(f"/tasks/{task['id']}/status", json={"status": "archived"})
        assert response.status_code == 422

    def test_assign_and_update(self, client: TestClient):
        task = _task(client)
        response = client.post(f"/tasks/{task['id']}/assign", json={"assignee": "李师傅"})
        assert response.json()["assignee"] == "李师傅"
        response = client.patch(f"/tasks/{task['id']}", json={"priority": "high", "title": "深度清洁"})
        assert response.json()["priority"] == "high"
        assert response.json()["title"] == "深度清洁"

    def test_assign_cancelled_task(self, client: TestClient):
        task = _task(client)
        client.post(f"/tasks/{task['id']}/status", json={"status": "cancelled"})
        response = client.post(f"/tasks/{task['id']}/assign", json={"assignee": "李师傅"})
        assert response.status_code == 409

    def test_list_summary_delete(self, client: TestClient):
        a = _task(client, priority="low")
        _task(client, title="修空调", assignee="李师傅", priority="high")
        titles = [t["title"] for t in client.get("/tasks", params={"sort": "priority"}).json()]
        assert titles == ["修空调", "打扫 A101"]
        assert client.get("/tasks/summary").json()["todo"] == 2

        assert client.delete(f"/tasks/{a['id']}").status_code == 200
        assert client.get(f"/tasks/{a['id']}").status_code == 404


class TestCatalogApi:
    """服务目录与楼栋"""

    def test_service_crud(self, client: TestClient):
        service = client.post("/services", json={"name": "洗衣", "unit": "件", "price": "15"}).json()
        assert service["price"] == "15"
        response = client.patch(f"/services/{service['id']}", json={"price": "18.5"})
        assert response.json()["price"] == "18.5"
        assert [s["name"] for s in client.get("/services").json()] == ["洗衣"]
        assert client.delete(f"/services/{service['id']}").status_code == 200
        assert client.get(f"/services/{service['id']}").status_code == 404

    def test_negative_price(self, client: TestClient):
        response = client.post("/services", json={"name": "洗衣", "unit": "件", "price": "-1"})
        assert response.status_code == 422

    def test_buildings(self, client: TestClient):
        building = client.post("/buildings", json={"name": "A栋", "note": "主楼"}).json()
        assert client.post("/buildings", json={"name": "A栋"}).status_code == 422

        room = client.post("/rooms", json={"name": "A101", "capacity": 2, "building": "A栋"}).json()
        response = client.delete(f"/buildings/{building['id']}")
        assert response.status_code == 409

        client.patch(f"/buildings/{building['id']}", json={"name": "主楼A"})
        assert client.get(f"/rooms/{room['id']}").json()["building"] == "主楼A"
        assert [b["name"] for b in client.get("/buildings").json()] == ["主楼A"]

    def test_room_types(self, client: TestClient):
        room_type = client.post(
            "/room-types", json={"code": "DBL", "name": "双人间", "basePrice": "320", "capacity": 2}
        ).json()
        assert Decimal(room_type["basePrice"]) == Decimal("320")
        assert client.post("/room-types", json={"code": "DBL", "name": "重复"}).status_code == 422

        response = client.patch(f"/room-types/{room_type['id']}", json={"name": "豪华双人间"})
        assert response.json()["name"] == "豪华双人间"
        assert [t["code"] for t in client.get("/room-types").json()] == ["DBL"]

        room = client.post("/rooms", json={"name": "A101", "capacity": 2, "roomTypeId": room_type["id"]}).json()
        assert room["roomTypeId"] == room_type["id"]
        response = client.delete(f"/room-types/{room_type['id']}")
        assert response.status_code == 409
        assert response.headers["X-Error-Code"] == "room_in_use"

        client.delete(f"/rooms/{room['id']}")
        assert client.delete(f"/room-types/{room_type['id']}").status_code == 200
        assert client.get(f"/room-types/{room_type['id']}").status_code == 404

    def test_room_with_unknown_type(self, client: TestClient):
        response = client.post("/rooms", json={"name": "A101", "capacity": 2, "roomTypeId": "rt_missing"})
        assert response.status_code == 404


class TestTicketsApi:
    """工单"""

    def test_lifecycle(self, client: TestClient):
        ticket = client.post("/tickets", json={"title": "102 空调故障"}).json()
        assert ticket["status"] == "open"

        response = client.post(f"/tickets/{ticket['id']}/complete")
        assert response.status_code == 409
        assert response.headers["X-Error-Code"] == "invalid_state"

        response = client.post(f"/tickets/{ticket['id']}/assign", json={"assignee": "李师傅"})
        assert response.json()["status"] == "in_progress"
        assert response.json()["assignee"] == "李师傅"

        response = client.post(f"/tickets/{ticket['id']}/complete")
        assert response.json()["status"] == "done"
        assert client.patch(f"/tickets/{ticket['id']}", json={"title": "改"}).status_code == 409

    def test_reset_and_list(self, client: TestClient):
        ticket = client.post("/tickets", json={"title": "三楼卫生反馈", "assignee": "王阿姨"}).json()
        client.post(f"/tickets/{ticket['id']}/assign", json={"assignee": "王阿姨"})
        response = client.post(f"/tickets/{ticket['id']}/reset")
        assert response.json()["status"] == "open"
        assert response.json()["assignee"] is None

        assert [t["id"] for t in client.get("/tickets", params={"status": "open"}).json()] == [ticket["id"]]
        assert client.get("/tickets", params={"status": "done"}).json() == []
        assert client.get("/tickets/tk_missing").status_code == 404
