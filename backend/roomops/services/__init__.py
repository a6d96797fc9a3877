"""
业务服务层 - 每类实体一个服务，依赖 Stores 读写数据
"""
from roomops.services.room_service import RoomService
from roomops.services.booking_service import BookingService
from roomops.services.service_order_service import ServiceOrderService
from roomops.services.invoice_service import InvoiceService
from roomops.services.task_service import TaskService
from roomops.services.catalog_service import CatalogService, RoomTypeService, BuildingService
from roomops.services.ticket_service import TicketService
from roomops.services.history_service import HistoryService
from roomops.services.report_service import ReportService
from roomops.services.event_handlers import EventHandlers, register_event_handlers

__all__ = [
    "RoomService", "BookingService", "ServiceOrderService", "InvoiceService",
    "TaskService", "TicketService", "CatalogService", "RoomTypeService",
    "BuildingService", "HistoryService",
    "ReportService", "EventHandlers", "register_event_handlers",
]
