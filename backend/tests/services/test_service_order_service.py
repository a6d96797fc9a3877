"""
Tests for roomops/services/service_order_service.py
Covers: create_order, add_line_item, remove_line_item, transition,
        list_orders, delete_order, create_invoice
"""
import threading
import time

import pytest
from decimal import Decimal

from roomops.core.errors import InvalidState, InvalidTransition, NotFound, ValidationError
from roomops.models.events import EventType
from roomops.models.ontology import InvoiceStatus, ServiceOrderStatus
from roomops.services.catalog_service import CatalogService
from roomops.services.service_order_service import ServiceOrderService


# ── helpers ──────────────────────────────────────────────────────────

def _noop(event):
    pass


def _order(stores, customer="张三", items=()):
    return ServiceOrderService(stores, _noop).create_order(customer, room_code="A101", items=items)


# ── tests ────────────────────────────────────────────────────────────

class TestLineItems:

    def test_total_with_free_item(self, stores):
        """[2×15000, 1×0] = 30000"""
        service = ServiceOrderService(stores, _noop)
        order = _order(stores)
        service.add_line_item(order.id, "洗衣", 2, Decimal("15000"))
        order = service.add_line_item(order.id, "矿泉水", 1, Decimal("0"))
        assert order.total_amount == Decimal("30000")
        assert stores.service_orders.get(order.id).total_amount == Decimal("30000")

    def test_create_with_items(self, stores):
        order = _order(stores, items=[
            {"service_name": "早餐", "quantity": 2, "unit_price": "25.5"},
        ])
        assert order.code.startswith("SO")
        assert order.total_amount == Decimal("51.0")

    def test_empty_order_total_is_zero(self, stores):
        assert _order(stores).total_amount == Decimal("0")

    @pytest.mark.parametrize("quantity,price", [(0, "10"), (-1, "10"), (1, "-0.01"), (1, "abc")])
    def test_invalid_item(self, stores, quantity, price):
        order = _order(stores)
        with pytest.raises(ValidationError):
            ServiceOrderService(stores, _noop).add_line_item(order.id, "洗衣", quantity, price)
        assert stores.service_orders.get(order.id).items == []

    def test_item_from_catalog(self, stores):
        laundry = CatalogService(stores).create_service("洗衣", "件", "15")
        order = _order(stores)
        order = ServiceOrderService(stores, _noop).add_line_item(order.id, quantity=3, service_id=laundry.id)
        assert order.items[0].service_name == "洗衣"
        assert order.total_amount == Decimal("45")

    def test_unknown_catalog_item(self, stores):
        order = _order(stores)
        with pytest.raises(NotFound):
            ServiceOrderService(stores, _noop).add_line_item(order.id, quantity=1, service_id="svc_missing")

    def test_remove_item(self, stores):
        service = ServiceOrderService(stores, _noop)
        order = _order(stores)
        order = service.add_line_item(order.id, "洗衣", 2, "15")
        order = service.add_line_item(order.id, "早餐", 1, "30")
        order = service.remove_line_item(order.id, order.items[0].id)
        assert [i.service_name for i in order.items] == ["早餐"]
        assert order.total_amount == Decimal("30")

    def test_remove_unknown_item(self, stores):
        order = _order(stores)
        with pytest.raises(NotFound):
            ServiceOrderService(stores, _noop).remove_line_item(order.id, "li_missing")

    def test_items_frozen_after_completion(self, stores):
        service = ServiceOrderService(stores, _noop)
        order = _order(stores)
        order = service.add_line_item(order.id, "洗衣", 1, "15")
        service.transition(order.id, ServiceOrderStatus.COMPLETED)
        with pytest.raises(InvalidState):
            service.add_line_item(order.id, "早餐", 1, "30")
        with pytest.raises(InvalidState):
            service.remove_line_item(order.id, order.items[0].id)


class TestTransition:

    def test_pending_to_in_progress_to_completed(self, stores, publish, events):
        service = ServiceOrderService(stores, publish)
        order = service.create_order("张三")
        service.transition(order.id, "in_progress")
        order = service.transition(order.id, ServiceOrderStatus.COMPLETED)
        assert order.status == ServiceOrderStatus.COMPLETED
        assert [e.event_type for e in events] == [
            EventType.SERVICE_ORDER_STATUS_CHANGED.value,
            EventType.SERVICE_ORDER_STATUS_CHANGED.value,
            EventType.SERVICE_ORDER_COMPLETED.value,
        ]

    def test_completed_is_terminal(self, stores):
        service = ServiceOrderService(stores, _noop)
        order = _order(stores)
        service.transition(order.id, ServiceOrderStatus.COMPLETED)
        with pytest.raises(InvalidTransition):
            service.transition(order.id, ServiceOrderStatus.IN_PROGRESS)

    def test_cancelled_is_terminal(self, stores):
        service = ServiceOrderService(stores, _noop)
        order = _order(stores)
        service.transition(order.id, ServiceOrderStatus.CANCELLED)
        with pytest.raises(InvalidTransition):
            service.transition(order.id, ServiceOrderStatus.COMPLETED)


class TestListAndDelete:

    def test_search_and_sort(self, stores):
        service = ServiceOrderService(stores, _noop)
        a = service.create_order("张三", room_code="A101")
        b = service.create_order("李四", room_code="B201")
        service.add_line_item(a.id, "洗衣", 1, "10")
        service.add_line_item(b.id, "洗衣", 1, "99")

        assert [o.customer_name for o in service.list_orders(sort="total_amount")] == ["李四", "张三"]
        assert [o.customer_name for o in service.list_orders(sort="total_amount", descending=False)] == ["张三", "李四"]
        assert [o.customer_name for o in service.list_orders(query="b201")] == ["李四"]
        assert service.list_orders(status="completed") == []

    def test_unknown_sort_field(self, stores):
        with pytest.raises(ValidationError):
            ServiceOrderService(stores, _noop).list_orders(sort="price")

    def test_delete(self, stores):
        order = _order(stores)
        assert ServiceOrderService(stores, _noop).delete_order(order.id)
        with pytest.raises(NotFound):
            ServiceOrderService(stores, _noop).get_order(order.id)


class TestInvoiceFromOrder:

    def test_invoice_completed_order(self, stores):
        service = ServiceOrderService(stores, _noop)
        order = _order(stores)
        service.add_line_item(order.id, "洗衣", 2, "15000")
        service.add_line_item(order.id, "矿泉水", 1, "0")
        service.transition(order.id, ServiceOrderStatus.COMPLETED)

        invoice = service.create_invoice(order.id)
        assert invoice.status == InvoiceStatus.UNPAID
        assert invoice.total == Decimal("30000")
        assert invoice.service_order_id == order.id
        assert [i.description for i in invoice.items] == ["洗衣", "矿泉水"]
        assert service.get_order(order.id).invoice_id == invoice.id

    def test_pending_order_cannot_be_invoiced(self, stores):
        order = _order(stores)
        with pytest.raises(InvalidState):
            ServiceOrderService(stores, _noop).create_invoice(order.id)

    def test_invoice_only_once(self, stores):
        service = ServiceOrderService(stores, _noop)
        order = _order(stores, items=[{"service_name": "洗衣", "quantity": 1, "unit_price": "15"}])
        service.transition(order.id, ServiceOrderStatus.COMPLETED)
        service.create_invoice(order.id)
        with pytest.raises(InvalidState):
            service.create_invoice(order.id)

    def test_overlapping_requests_create_one_invoice(self, stores):
        service = ServiceOrderService(stores, _noop)
        order = _order(stores, items=[{"service_name": "洗衣", "quantity": 1, "unit_price": "15"}])
        service.transition(order.id, ServiceOrderStatus.COMPLETED)

        # 放慢账单写入，让并发请求都停在检查与关联之间
        insert = stores.invoices.insert

        def slow_insert(invoice):
            time.sleep(0.05)
            return insert(invoice)

        stores.invoices.insert = slow_insert
        outcomes = []

        def invoice_order():
            try:
                ServiceOrderService(stores, _noop).create_invoice(order.id)
                outcomes.append("ok")
            except InvalidState:
                outcomes.append("already")

        threads = [threading.Thread(target=invoice_order) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["already", "already", "ok"]
        invoices = stores.invoices.list(service_order_id=order.id)
        assert len(invoices) == 1
        assert service.get_order(order.id).invoice_id == invoices[0].id

    def test_empty_completed_order_gives_zero_invoice(self, stores):
        service = ServiceOrderService(stores, _noop)
        order = _order(stores)
        service.transition(order.id, ServiceOrderStatus.COMPLETED)
        invoice = service.create_invoice(order.id)
        assert invoice.items == []
        assert invoice.total == Decimal("0")
