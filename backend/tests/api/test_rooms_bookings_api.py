"""
房间与预订 API 测试
覆盖 /rooms、/bookings 端点与错误码映射
"""
from fastapi.testclient import TestClient


# ── helpers ──────────────────────────────────────────────────────────

def _room(client, name="A101", capacity=2, building="A栋"):
    response = client.post("/rooms", json={"name": name, "capacity": capacity, "building": building})
    assert response.status_code == 200
    return response.json()


def _booking(client, room_id, start="2025-01-01", end="2025-01-03", name="张三", approve=True):
    response = client.post("/bookings", json={
        "roomId": room_id, "customerName": name, "start": start, "end": end,
    })
    assert response.status_code == 200, response.text
    booking = response.json()
    if approve:
        booking = client.post(f"/bookings/{booking['id']}/approve").json()
    return booking


# ── tests ────────────────────────────────────────────────────────────

class TestRoomsApi:
    """房间管理"""

    def test_create_and_get(self, client: TestClient):
        room = _room(client)
        assert room["status"] == "available"
        assert room["currentGuest"] is None
        assert "createdAt" in room

        response = client.get(f"/rooms/{room['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == "A101"

    def test_invalid_capacity(self, client: TestClient):
        response = client.post("/rooms", json={"name": "A101", "capacity": 0})
        assert response.status_code == 422
        assert response.headers["X-Error-Code"] == "validation_error"

    def test_get_missing(self, client: TestClient):
        response = client.get("/rooms/room_missing")
        assert response.status_code == 404
        assert "不存在" in response.json()["detail"]

    def test_list_and_summary(self, client: TestClient):
        _room(client, "A101")
        _room(client, "B201", building="B栋")
        assert len(client.get("/rooms").json()) == 2
        assert [r["name"] for r in client.get("/rooms", params={"building": "B栋"}).json()] == ["B201"]
        summary = client.get("/rooms/summary").json()
        assert summary["available"] == 2
        assert summary["total"] == 2

    def test_update(self, client: TestClient):
        room = _room(client)
        response = client.patch(f"/rooms/{room['id']}", json={"capacity": 4})
        assert response.status_code == 200
        assert response.json()["capacity"] == 4

    def test_status_changes(self, client: TestClient):
        room = _room(client)
        response = client.post(f"/rooms/{room['id']}/status", json={"status": "occupied"})
        assert response.status_code == 409

        booking = _booking(client, room["id"])
        response = client.post(f"/rooms/{room['id']}/status", json={"status": "occupied", "bookingId": booking["id"]})
        assert response.status_code == 200
        assert response.json()["currentGuest"] == "张三"

        response = client.post(f"/rooms/{room['id']}/status", json={"status": "occupied", "bookingId": booking["id"]})
        assert response.status_code == 409
        assert response.headers["X-Error-Code"] == "invalid_transition"

    def test_delete_room_in_use(self, client: TestClient):
        room = _room(client)
        _booking(client, room["id"])
        response = client.delete(f"/rooms/{room['id']}")
        assert response.status_code == 409
        assert response.headers["X-Error-Code"] == "room_in_use"

    def test_delete_room(self, client: TestClient):
        room = _room(client)
        assert client.delete(f"/rooms/{room['id']}").status_code == 200
        assert client.get(f"/rooms/{room['id']}").status_code == 404


class TestBookingsApi:
    """预订管理"""

    def test_double_booking(self, client: TestClient):
        room = _room(client)
        first = _booking(client, room["id"], "2025-01-01", "2025-01-03")
        assert first["status"] == "confirmed"
        assert first["nights"] == 2

        response = client.post("/bookings", json={
            "roomId": room["id"], "customerName": "李四", "start": "2025-01-02", "end": "2025-01-04",
        })
        assert response.status_code == 409
        assert response.headers["X-Error-Code"] == "room_unavailable"

    def test_same_day_turnover(self, client: TestClient):
        room = _room(client)
        _booking(client, room["id"], "2025-01-01", "2025-01-03")
        second = _booking(client, room["id"], "2025-01-03", "2025-01-05", name="李四")
        assert second["status"] == "confirmed"

    def test_snake_case_input(self, client: TestClient):
        room = _room(client)
        response = client.post("/bookings", json={
            "room_id": room["id"], "customer_name": "张三", "start": "2025-01-01", "end": "2025-01-02",
        })
        assert response.status_code == 200
        assert response.json()["roomName"] == "A101"

    def test_bad_date_range(self, client: TestClient):
        room = _room(client)
        response = client.post("/bookings", json={
            "roomId": room["id"], "customerName": "张三", "start": "2025-01-03", "end": "2025-01-01",
        })
        assert response.status_code == 422
        assert response.headers["X-Error-Code"] == "date_range_invalid"

    def test_stay_lifecycle(self, client: TestClient):
        room = _room(client)
        booking = _booking(client, room["id"])

        response = client.post(f"/bookings/{booking['id']}/check-in")
        assert response.status_code == 200
        assert response.json()["status"] == "checked_in"
        assert response.json()["checkedInAt"] is not None
        assert client.get(f"/rooms/{room['id']}").json()["status"] == "occupied"

        response = client.post(f"/bookings/{booking['id']}/check-out")
        assert response.status_code == 200
        room_data = client.get(f"/rooms/{room['id']}").json()
        assert room_data["status"] == "cleaning"
        assert room_data["currentGuest"] is None

        # 客户活动记录由事件处理器写入
        history = client.get("/history", params={"query": "张三"}).json()
        assert {h["type"] for h in history} == {"check_in", "check_out"}

    def test_approve_twice(self, client: TestClient):
        room = _room(client)
        booking = _booking(client, room["id"])
        response = client.post(f"/bookings/{booking['id']}/approve")
        assert response.status_code == 409
        assert response.headers["X-Error-Code"] == "invalid_state"

    def test_reject(self, client: TestClient):
        room = _room(client)
        booking = _booking(client, room["id"], approve=False)
        response = client.post(f"/bookings/{booking['id']}/reject", json={"reason": "满房"})
        assert response.status_code == 200
        assert response.json()["reason"] == "满房"

    def test_cancel_idempotent(self, client: TestClient):
        room = _room(client)
        booking = _booking(client, room["id"])
        assert client.post(f"/bookings/{booking['id']}/cancel", json={"reason": "行程变更"}).status_code == 200
        response = client.post(f"/bookings/{booking['id']}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_list_filters(self, client: TestClient):
        room = _room(client)
        _booking(client, room["id"], name="张三")
        _booking(client, room["id"], "2025-02-01", "2025-02-02", name="李四", approve=False)
        assert len(client.get("/bookings").json()) == 2
        assert [b["customerName"] for b in client.get("/bookings", params={"status": "pending"}).json()] == ["李四"]
        assert [b["customerName"] for b in client.get("/bookings", params={"query": "张"}).json()] == ["张三"]

    def test_missing_booking(self, client: TestClient):
        assert client.post("/bookings/bk_missing/check-in").status_code == 404
