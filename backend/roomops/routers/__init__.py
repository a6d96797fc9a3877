"""
API 路由
"""
from roomops.routers import (
    rooms, bookings, service_orders, invoices, tasks, tickets, catalog, history, reports,
)

__all__ = [
    "rooms", "bookings", "service_orders", "invoices", "tasks", "tickets",
    "catalog", "history", "reports",
]
