"""
领域事件定义 (Domain Events)
服务在写入成功后发布，历史记录处理器订阅
"""
from enum import Enum
from dataclasses import dataclass, field, asdict
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, Dict, Any


class EventType(str, Enum):
    """事件类型枚举"""
    # 房间相关
    ROOM_CREATED = "room.created"
    ROOM_STATUS_CHANGED = "room.status_changed"
    ROOM_DELETED = "room.deleted"

    # 预订相关
    BOOKING_CREATED = "booking.created"
    BOOKING_APPROVED = "booking.approved"
    BOOKING_REJECTED = "booking.rejected"
    BOOKING_CHECKED_IN = "booking.checked_in"
    BOOKING_CHECKED_OUT = "booking.checked_out"
    BOOKING_CANCELLED = "booking.cancelled"

    # 服务单相关
    SERVICE_ORDER_STATUS_CHANGED = "service_order.status_changed"
    SERVICE_ORDER_COMPLETED = "service_order.completed"

    # 账单相关
    INVOICE_CREATED = "invoice.created"
    INVOICE_PAID = "invoice.paid"
    INVOICE_VOIDED = "invoice.voided"

    # 任务相关
    TASK_CREATED = "task.created"
    TASK_ASSIGNED = "task.assigned"
    TASK_STATUS_CHANGED = "task.status_changed"

    # 工单相关
    TICKET_CREATED = "ticket.created"
    TICKET_STATUS_CHANGED = "ticket.status_changed"


@dataclass
class BaseEventData:
    """事件数据基类"""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，日期和金额转为字符串"""
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, (datetime, date)):
                result[key] = value.isoformat()
            elif isinstance(value, Decimal):
                result[key] = str(value)
        return result


@dataclass
class RoomStatusChangedData(BaseEventData):
    """房间状态变更事件数据"""
    room_id: str = ""
    room_name: str = ""
    old_status: str = ""
    new_status: str = ""
    booking_id: Optional[str] = None
    reason: str = ""


@dataclass
class BookingEventData(BaseEventData):
    """预订事件数据（创建/审批/入住/退房/取消共用）"""
    booking_id: str = ""
    booking_code: str = ""
    room_id: str = ""
    room_name: str = ""
    customer_name: str = ""
    start: Optional[date] = None
    end: Optional[date] = None
    old_status: str = ""
    new_status: str = ""
    reason: str = ""


@dataclass
class ServiceOrderStatusData(BaseEventData):
    """服务单状态事件数据"""
    order_id: str = ""
    order_code: str = ""
    customer_name: str = ""
    room_code: Optional[str] = None
    old_status: str = ""
    new_status: str = ""
    total_amount: Decimal = Decimal("0")
    item_count: int = 0


@dataclass
class InvoiceEventData(BaseEventData):
    """账单事件数据"""
    invoice_id: str = ""
    customer_name: str = ""
    status: str = ""
    total: Decimal = Decimal("0")
    payment_method: Optional[str] = None
    reference_code: Optional[str] = None


@dataclass
class TaskEventData(BaseEventData):
    """任务事件数据"""
    task_id: str = ""
    title: str = ""
    assignee: str = ""
    old_status: str = ""
    new_status: str = ""


@dataclass
class TicketEventData(BaseEventData):
    """工单事件数据"""
    ticket_id: str = ""
    title: str = ""
    assignee: Optional[str] = None
    old_status: str = ""
    new_status: str = ""
