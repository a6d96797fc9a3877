"""
报表服务 - 仪表盘统计
房态、预订、任务计数，热门服务与收款汇总
"""
from typing import List
from collections import Counter
from datetime import date, timedelta
from decimal import Decimal

from roomops.models.ontology import (
    BookingStatus, InvoiceStatus, RoomStatus, ServiceOrderStatus, TaskStatus,
)
from roomops.stores import Stores

# 收款报表天数范围
MIN_PAYMENT_DAYS = 7
MAX_PAYMENT_DAYS = 30


class ReportService:
    """报表服务"""

    def __init__(self, stores: Stores):
        self.stores = stores

    def get_dashboard_stats(self) -> dict:
        """获取仪表盘统计数据"""
        today = date.today()

        # 房间统计
        rooms = self.stores.rooms.list()
        total_rooms = len(rooms)
        room_counts = {status.value: 0 for status in RoomStatus}
        for room in rooms:
            room_counts[room.status.value] += 1

        # 入住率（维修房不计入可售房）
        sellable_rooms = total_rooms - room_counts[RoomStatus.MAINTENANCE.value]
        occupied = room_counts[RoomStatus.OCCUPIED.value]
        occupancy_rate = (occupied / sellable_rooms * 100) if sellable_rooms > 0 else 0

        # 预订统计
        bookings = self.stores.bookings.list()
        booking_counts = {status.value: 0 for status in BookingStatus}
        for booking in bookings:
            booking_counts[booking.status.value] += 1
        today_arrivals = len([
            b for b in bookings if b.start == today and b.status == BookingStatus.CONFIRMED
        ])
        today_departures = len([
            b for b in bookings if b.end == today and b.status == BookingStatus.CHECKED_IN
        ])

        return {
            'total_rooms': total_rooms,
            'rooms': room_counts,
            'occupancy_rate': round(occupancy_rate, 1),
            'total_bookings': len(bookings),
            'bookings': booking_counts,
            'today_arrivals': today_arrivals,
            'today_departures': today_departures,
            'tasks': self.get_task_counts(),
        }

    def get_task_counts(self) -> dict:
        """按状态统计任务"""
        counts = {status.value: 0 for status in TaskStatus}
        for task in self.stores.tasks.list():
            counts[task.status.value] += 1
        return counts

    def get_top_services(self, limit: int = 5) -> List[dict]:
        """
        最常点的服务

        按未取消服务单明细的数量合计排序，数量相同按名称。
        """
        quantities: Counter = Counter()
        amounts = {}
        for order in self.stores.service_orders.list():
            if order.status == ServiceOrderStatus.CANCELLED:
                continue
            for item in order.items:
                quantities[item.service_name] += item.quantity
                amounts[item.service_name] = amounts.get(item.service_name, Decimal("0")) + item.total

        ranked = sorted(quantities.items(), key=lambda kv: (-kv[1], kv[0]))
        return [
            {'service_name': name, 'quantity': quantity, 'amount': amounts[name]}
            for name, quantity in ranked[:max(limit, 0)]
        ]

    def get_payment_report(self, days: int = 7) -> dict:
        """
        收款汇总：最近 days 天（含今天）已支付账单的笔数、金额与每日序列

        days 限制在 7 到 30 之间。
        """
        days = min(max(days, MIN_PAYMENT_DAYS), MAX_PAYMENT_DAYS)
        today = date.today()
        start_date = today - timedelta(days=days - 1)

        daily = {start_date + timedelta(days=i): Decimal("0") for i in range(days)}
        count = 0
        total = Decimal("0")
        for invoice in self.stores.invoices.list(status=InvoiceStatus.PAID):
            paid_on = (invoice.paid_at or invoice.created_at).date()
            if paid_on not in daily:
                continue
            daily[paid_on] += invoice.total
            count += 1
            total += invoice.total

        return {
            'days': days,
            'count': count,
            'total': total,
            'series': [{'day': day, 'amount': amount} for day, amount in daily.items()],
        }
