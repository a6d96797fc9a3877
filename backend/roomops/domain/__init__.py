"""
领域记录 - 各实体的数据结构、状态机与派生计算
"""
from roomops.domain.room import Room, ROOM_STATE_MACHINE
from roomops.domain.booking import Booking, BOOKING_STATE_MACHINE, ACTIVE_STATUSES, ranges_overlap
from roomops.domain.billing import (
    LineItem, ServiceOrder, InvoiceItem, Invoice, compute_total, field_value,
    SERVICE_ORDER_STATE_MACHINE, INVOICE_STATE_MACHINE, PAYMENT_METHODS,
)
from roomops.domain.task import StaffTask, TASK_STATE_MACHINE
from roomops.domain.ticket import Ticket, TICKET_STATE_MACHINE
from roomops.domain.catalog import ServiceItem, RoomType, Building
from roomops.domain.history import HistoryEntry

__all__ = [
    "Room", "ROOM_STATE_MACHINE",
    "Booking", "BOOKING_STATE_MACHINE", "ACTIVE_STATUSES", "ranges_overlap",
    "LineItem", "ServiceOrder", "InvoiceItem", "Invoice", "compute_total", "field_value",
    "SERVICE_ORDER_STATE_MACHINE", "INVOICE_STATE_MACHINE", "PAYMENT_METHODS",
    "StaffTask", "TASK_STATE_MACHINE",
    "Ticket", "TICKET_STATE_MACHINE",
    "ServiceItem", "RoomType", "Building", "HistoryEntry",
]
