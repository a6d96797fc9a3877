"""
金额派生与区间重叠测试
"""
from datetime import date
from decimal import Decimal

from roomops.domain import (
    Booking, Invoice, InvoiceItem, LineItem, ServiceOrder, compute_total, ranges_overlap,
)


class TestComputeTotal:

    def test_empty_is_zero(self):
        assert compute_total([]) == Decimal("0")

    def test_free_item_counts(self):
        """[2×15000, 1×0] = 30000"""
        items = [
            {"quantity": 2, "unit_price": Decimal("15000")},
            {"quantity": 1, "unit_price": Decimal("0")},
        ]
        assert compute_total(items) == Decimal("30000")

    def test_float_price_is_exact(self):
        assert compute_total([{"quantity": 3, "unit_price": 0.1}]) == Decimal("0.3")

    def test_order_total_follows_items(self):
        order = ServiceOrder(id="so_1", code="SO1", customer_name="张三")
        assert order.total_amount == 0
        order.items.append(LineItem(id="li_1", service_name="洗衣", quantity=2, unit_price=Decimal("15000")))
        order.items.append(LineItem(id="li_2", service_name="矿泉水", quantity=1, unit_price=Decimal("0")))
        assert order.total_amount == Decimal("30000")
        assert order.items[1].total == Decimal("0")

    def test_invoice_totals(self):
        invoice = Invoice(id="inv_1", customer_name="张三", items=[
            InvoiceItem(id="ii_1", description="早餐", quantity=2, unit_price=Decimal("25.50")),
            InvoiceItem(id="ii_2", description="洗衣", quantity=1, unit_price=Decimal("30")),
        ])
        assert invoice.items[0].total == Decimal("51.00")
        assert invoice.subtotal == Decimal("81.00")
        assert invoice.tax == 0
        assert invoice.total == invoice.subtotal


class TestOverlap:

    def test_same_day_turnover_is_not_overlap(self):
        assert not ranges_overlap(date(2025, 1, 1), date(2025, 1, 3), date(2025, 1, 3), date(2025, 1, 5))

    def test_partial_overlap(self):
        assert ranges_overlap(date(2025, 1, 1), date(2025, 1, 3), date(2025, 1, 2), date(2025, 1, 4))

    def test_containment(self):
        assert ranges_overlap(date(2025, 1, 1), date(2025, 1, 10), date(2025, 1, 3), date(2025, 1, 4))

    def test_booking_helpers(self):
        booking = Booking(id="bk_1", code="BK1", room_id="r1", customer_name="张三",
                          start=date(2025, 1, 1), end=date(2025, 1, 3))
        assert booking.nights == 2
        assert booking.covers(date(2025, 1, 2))
        assert not booking.covers(date(2025, 1, 3))
        assert not booking.is_active
