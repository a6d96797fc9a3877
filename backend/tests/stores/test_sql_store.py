"""
SqlAlchemyStore 与 InMemoryStore 测试
服务在两种存储上行为一致
"""
import pytest
from datetime import date
from decimal import Decimal

from roomops.core.errors import NotFound, RoomUnavailable
from roomops.core.store import InMemoryStore
from roomops.domain import Room
from roomops.models.ontology import (
    BookingRow, InvoiceRow, RoomStatus, ServiceOrderItemRow, ServiceOrderStatus,
    TicketStatus,
)
from roomops.services.booking_service import BookingService
from roomops.services.catalog_service import RoomTypeService
from roomops.services.invoice_service import InvoiceService
from roomops.services.room_service import RoomService
from roomops.services.service_order_service import ServiceOrderService
from roomops.services.ticket_service import TicketService


def _noop(event):
    pass


class TestInMemoryStore:

    def test_reads_are_copies(self):
        store = InMemoryStore("Room")
        store.insert(Room(id="r1", name="A101", capacity=2))
        room = store.get("r1")
        room.name = "changed"
        assert store.get("r1").name == "A101"

    def test_duplicate_insert(self):
        store = InMemoryStore("Room")
        store.insert(Room(id="r1", name="A101", capacity=2))
        with pytest.raises(ValueError):
            store.insert(Room(id="r1", name="A102", capacity=2))

    def test_update_missing(self):
        with pytest.raises(NotFound):
            InMemoryStore("Room").update(Room(id="r1", name="A101", capacity=2))

    def test_require_and_delete(self):
        store = InMemoryStore("Room")
        store.insert(Room(id="r1", name="A101", capacity=2))
        assert store.delete("r1")
        assert not store.delete("r1")
        with pytest.raises(NotFound) as exc:
            store.require("r1")
        assert exc.value.entity == "Room"


class TestSqlAlchemyStore:

    def test_room_roundtrip(self, sql_bundle):
        room = RoomService(sql_bundle, _noop).create_room("A101", 2, "A栋")
        loaded = sql_bundle.rooms.get(room.id)
        assert loaded == room
        assert sql_bundle.rooms.list(status=RoomStatus.AVAILABLE) == [room]
        assert sql_bundle.rooms.list(building="B栋") == []

    def test_room_type_and_ticket_roundtrip(self, sql_bundle):
        room_type = RoomTypeService(sql_bundle).create_room_type("DBL", "双人间", "320", 2)
        room = RoomService(sql_bundle, _noop).create_room("A101", 2, room_type_id=room_type.id)
        assert sql_bundle.rooms.list(room_type_id=room_type.id) == [room]
        assert sql_bundle.room_types.get(room_type.id).base_price == Decimal("320")

        service = TicketService(sql_bundle, _noop)
        ticket = service.assign_ticket(service.create_ticket("102 空调故障").id, "李师傅")
        loaded = sql_bundle.tickets.get(ticket.id)
        assert loaded.status == TicketStatus.IN_PROGRESS
        assert loaded.assignee == "李师傅"

    def test_missing_records(self, sql_bundle):
        assert sql_bundle.rooms.get("room_missing") is None
        assert not sql_bundle.rooms.delete("room_missing")
        with pytest.raises(NotFound):
            sql_bundle.rooms.update(Room(id="room_missing", name="X", capacity=1))

    def test_booking_flow_is_persisted(self, sql_bundle, db_session):
        room = RoomService(sql_bundle, _noop).create_room("A101", 2)
        service = BookingService(sql_bundle, _noop)
        booking = service.create_booking(room.id, "张三", date(2025, 1, 1), date(2025, 1, 3))
        service.approve_booking(booking.id)
        service.check_in(booking.id)

        row = db_session.get(BookingRow, booking.id)
        assert row.status.value == "checked_in"
        assert row.start == date(2025, 1, 1)
        assert sql_bundle.rooms.get(room.id).current_guest == "张三"

        with pytest.raises(RoomUnavailable):
            service.create_booking(room.id, "李四", date(2025, 1, 2), date(2025, 1, 4))
        assert service.create_booking(room.id, "李四", date(2025, 1, 3), date(2025, 1, 4))

    def test_line_items_merge(self, sql_bundle, db_session):
        service = ServiceOrderService(sql_bundle, _noop)
        order = service.create_order("张三")
        service.add_line_item(order.id, "洗衣", 2, "15000")
        order = service.add_line_item(order.id, "矿泉水", 1, "0")
        first_id = order.items[0].id

        loaded = sql_bundle.service_orders.get(order.id)
        assert [i.service_name for i in loaded.items] == ["洗衣", "矿泉水"]
        assert loaded.total_amount == Decimal("30000")

        service.remove_line_item(order.id, first_id)
        assert db_session.get(ServiceOrderItemRow, first_id) is None
        assert sql_bundle.service_orders.get(order.id).total_amount == Decimal("0")

    def test_order_list_filters_by_status(self, sql_bundle):
        service = ServiceOrderService(sql_bundle, _noop)
        a = service.create_order("张三")
        service.create_order("李四")
        service.transition(a.id, ServiceOrderStatus.COMPLETED)
        assert [o.customer_name for o in service.list_orders(status="completed")] == ["张三"]

    def test_invoice_derived_columns(self, sql_bundle, db_session):
        invoice = InvoiceService(sql_bundle, _noop).create_from_items("张三", [
            {"description": "洗衣", "quantity": 2, "unit_price": "15.50"},
        ])
        row = db_session.get(InvoiceRow, invoice.id)
        assert row.subtotal == Decimal("31.00")
        assert row.total == Decimal("31.00")
        assert row.items[0].total == Decimal("31.00")

    def test_invoice_and_order_link_commit_together(self, sql_bundle, monkeypatch):
        service = ServiceOrderService(sql_bundle, _noop)
        order = service.create_order("张三", items=[{"service_name": "洗衣", "quantity": 2, "unit_price": "15000"}])
        service.transition(order.id, ServiceOrderStatus.COMPLETED)

        def fail_update(record):
            raise RuntimeError("write failed")

        monkeypatch.setattr(sql_bundle.service_orders, "update", fail_update)
        with pytest.raises(RuntimeError):
            service.create_invoice(order.id)
        assert sql_bundle.invoices.list() == []

        monkeypatch.undo()
        invoice = service.create_invoice(order.id)
        assert sql_bundle.service_orders.get(order.id).invoice_id == invoice.id
        assert len(sql_bundle.invoices.list()) == 1

    def test_rollback_on_error(self, sql_bundle):
        room = RoomService(sql_bundle, _noop).create_room("A101", 2)
        with pytest.raises(RuntimeError):
            with sql_bundle.transaction():
                loaded = sql_bundle.rooms.get(room.id)
                loaded.name = "changed"
                sql_bundle.rooms.update(loaded)
                raise RuntimeError("boom")
        assert sql_bundle.rooms.get(room.id).name == "A101"
