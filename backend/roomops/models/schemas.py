"""
Pydantic 模式定义
用于 API 请求/响应验证

JSON 字段使用 camelCase（roomId、customerName、totalAmount ...），
请求同时接受 snake_case；金额以字符串形式输出。
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from roomops.models.ontology import (
    RoomStatus, BookingStatus, ServiceOrderStatus, InvoiceStatus,
    PaymentMethod, TaskPriority, TaskStatus, TicketStatus, HistoryType
)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============== 房间 Schemas ==============

class RoomCreate(CamelModel):
    name: str = Field(..., max_length=50)
    capacity: int
    building: Optional[str] = None
    room_type_id: Optional[str] = None


class RoomUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=50)
    capacity: Optional[int] = None
    building: Optional[str] = None
    room_type_id: Optional[str] = None


class RoomStatusUpdate(CamelModel):
    status: RoomStatus
    booking_id: Optional[str] = None
    reason: str = ""


class RoomResponse(CamelModel):
    id: str
    name: str
    capacity: int
    building: Optional[str] = None
    room_type_id: Optional[str] = None
    status: RoomStatus
    current_guest: Optional[str] = None
    current_booking_id: Optional[str] = None
    created_at: datetime


# ============== 预订 Schemas ==============

class BookingCreate(CamelModel):
    room_id: str
    customer_name: str = Field(..., max_length=100)
    start: date
    end: date
    guests: int = 1
    note: Optional[str] = None


class BookingReject(CamelModel):
    reason: str


class BookingCancel(CamelModel):
    reason: Optional[str] = None


class BookingResponse(CamelModel):
    id: str
    code: str
    room_id: str
    room_name: Optional[str] = None
    customer_name: str
    start: date
    end: date
    nights: int
    guests: int
    note: Optional[str] = None
    status: BookingStatus
    reason: Optional[str] = None
    created_at: datetime
    checked_in_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None


# ============== 服务单 Schemas ==============

class LineItemCreate(CamelModel):
    """service_id 指向服务目录时可省略名称和单价"""
    service_name: Optional[str] = None
    quantity: int = 1
    unit_price: Optional[Decimal] = None
    service_id: Optional[str] = None


class LineItemResponse(CamelModel):
    id: str
    service_name: str
    quantity: int
    unit_price: Decimal
    total: Decimal


class ServiceOrderCreate(CamelModel):
    customer_name: str = Field(..., max_length=100)
    room_code: Optional[str] = None
    note: Optional[str] = None
    items: List[LineItemCreate] = []


class ServiceOrderStatusUpdate(CamelModel):
    status: ServiceOrderStatus


class ServiceOrderResponse(CamelModel):
    id: str
    code: str
    customer_name: str
    room_code: Optional[str] = None
    status: ServiceOrderStatus
    note: Optional[str] = None
    invoice_id: Optional[str] = None
    created_at: datetime
    items: List[LineItemResponse] = []
    total_amount: Decimal


# ============== 账单 Schemas ==============

class InvoiceItemCreate(CamelModel):
    description: str
    quantity: int
    unit_price: Decimal


class InvoiceItemResponse(CamelModel):
    id: str
    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal


class InvoiceCreate(CamelModel):
    customer_name: str = Field(..., max_length=100)
    items: List[InvoiceItemCreate]


class InvoicePay(CamelModel):
    """method 不在模式层校验，由服务返回 InvalidMethod"""
    method: str
    reference_code: Optional[str] = None


class InvoiceResponse(CamelModel):
    id: str
    customer_name: str
    status: InvoiceStatus
    created_at: datetime
    items: List[InvoiceItemResponse] = []
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment_method: Optional[PaymentMethod] = None
    reference_code: Optional[str] = None
    paid_at: Optional[datetime] = None
    service_order_id: Optional[str] = None


# ============== 任务 Schemas ==============

class TaskCreate(CamelModel):
    title: str = Field(..., max_length=200)
    assignee: str = Field(..., max_length=100)
    due_date: Optional[date] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    description: Optional[str] = None


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[TaskPriority] = None


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


class TaskAssign(CamelModel):
    assignee: str


class TaskResponse(CamelModel):
    id: str
    title: str
    assignee: str
    due_date: Optional[date] = None
    priority: TaskPriority
    status: TaskStatus
    description: Optional[str] = None
    created_at: datetime


# ============== 工单 Schemas ==============

class TicketCreate(CamelModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = None
    assignee: Optional[str] = Field(None, max_length=100)


class TicketUpdate(CamelModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None


class TicketAssign(CamelModel):
    assignee: str


class TicketResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TicketStatus
    assignee: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ============== 服务目录 / 房型 / 楼栋 Schemas ==============

class ServiceItemCreate(CamelModel):
    name: str = Field(..., max_length=100)
    unit: str = Field(..., max_length=20)
    price: Decimal
    description: Optional[str] = None


class ServiceItemUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=100)
    unit: Optional[str] = Field(None, max_length=20)
    price: Optional[Decimal] = None
    description: Optional[str] = None


class ServiceItemResponse(CamelModel):
    id: str
    name: str
    unit: str
    price: Decimal
    description: Optional[str] = None


class RoomTypeCreate(CamelModel):
    code: str = Field(..., max_length=20)
    name: str = Field(..., max_length=100)
    base_price: Decimal = Decimal("0")
    capacity: int = 1
    description: Optional[str] = None


class RoomTypeUpdate(CamelModel):
    code: Optional[str] = Field(None, max_length=20)
    name: Optional[str] = Field(None, max_length=100)
    base_price: Optional[Decimal] = None
    capacity: Optional[int] = None
    description: Optional[str] = None


class RoomTypeResponse(CamelModel):
    id: str
    code: str
    name: str
    base_price: Decimal
    capacity: int
    description: Optional[str] = None
    created_at: datetime


class BuildingCreate(CamelModel):
    name: str = Field(..., max_length=50)
    note: Optional[str] = None


class BuildingUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=50)
    note: Optional[str] = None


class BuildingResponse(CamelModel):
    id: str
    name: str
    note: Optional[str] = None


# ============== 活动记录 / 报表 Schemas ==============

class HistoryEntryResponse(CamelModel):
    id: str
    customer_name: str
    type: HistoryType
    timestamp: datetime
    reference_id: Optional[str] = None
    note: Optional[str] = None


class DashboardStats(CamelModel):
    total_rooms: int
    rooms: Dict[str, int]
    occupancy_rate: float
    total_bookings: int
    bookings: Dict[str, int]
    today_arrivals: int
    today_departures: int
    tasks: Dict[str, int]


class TopService(CamelModel):
    service_name: str
    quantity: int
    amount: Decimal


class DailyAmount(CamelModel):
    day: date
    amount: Decimal


class PaymentReport(CamelModel):
    days: int
    count: int
    total: Decimal
    series: List[DailyAmount]
