"""
实体定义
枚举 + SQLAlchemy 表结构

表结构只是持久化形态，业务服务操作 roomops.domain 中的记录，
由 roomops.stores.sql_store 完成两者之间的映射。
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, ForeignKey, Text,
    Enum as SQLEnum, Numeric
)
from sqlalchemy.orm import relationship
from roomops.database import Base


# ============== 枚举定义 ==============

class RoomStatus(str, Enum):
    """房间状态枚举"""
    AVAILABLE = "available"        # 空闲
    OCCUPIED = "occupied"          # 入住中
    CLEANING = "cleaning"          # 待清洁
    MAINTENANCE = "maintenance"    # 维修中


class BookingStatus(str, Enum):
    """预订状态枚举"""
    PENDING = "pending"            # 待审批
    CONFIRMED = "confirmed"        # 已确认
    CHECKED_IN = "checked_in"      # 已入住
    CHECKED_OUT = "checked_out"    # 已退房
    CANCELLED = "cancelled"        # 已取消
    REJECTED = "rejected"          # 已拒绝


class ServiceOrderStatus(str, Enum):
    """服务单状态"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InvoiceStatus(str, Enum):
    """账单状态"""
    UNPAID = "unpaid"
    PAID = "paid"
    VOID = "void"


class PaymentMethod(str, Enum):
    """支付方式"""
    CASH = "cash"                  # 现金
    TRANSFER = "transfer"          # 转账


class TaskPriority(str, Enum):
    """任务优先级"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    """任务状态"""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"


class TicketStatus(str, Enum):
    """工单状态"""
    OPEN = "open"                  # 待处理
    IN_PROGRESS = "in_progress"    # 处理中
    DONE = "done"                  # 已完成


class HistoryType(str, Enum):
    """客户活动类型"""
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    SERVICE = "service"


# ============== 表定义 ==============

class BuildingRow(Base):
    """楼栋"""
    __tablename__ = "buildings"

    id = Column(String(40), primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    note = Column(Text)


class RoomTypeRow(Base):
    """房型"""
    __tablename__ = "room_types"

    id = Column(String(40), primary_key=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    base_price = Column(Numeric(12, 2), nullable=False, default=0)
    capacity = Column(Integer, nullable=False, default=1)
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.now)


class RoomRow(Base):
    """房间"""
    __tablename__ = "rooms"

    id = Column(String(40), primary_key=True)
    name = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False, default=1)
    building = Column(String(100), index=True)            # 楼栋名称（标签，非外键）
    room_type_id = Column(String(40), index=True)          # 房型
    status = Column(SQLEnum(RoomStatus), nullable=False, default=RoomStatus.AVAILABLE)
    current_guest = Column(String(100))                    # 当前住客
    current_booking_id = Column(String(40))                # 当前入住的预订
    created_at = Column(DateTime, default=datetime.now)


class BookingRow(Base):
    """
    预订
    room_id 只是引用：房间删除后保留历史预订
    """
    __tablename__ = "bookings"

    id = Column(String(40), primary_key=True)
    code = Column(String(20), unique=True, nullable=False)  # 预订号
    room_id = Column(String(40), index=True, nullable=False)
    room_name = Column(String(100))
    customer_name = Column(String(100), nullable=False)
    start = Column("start_date", Date, nullable=False)      # 入住日期
    end = Column("end_date", Date, nullable=False)          # 离店日期
    guests = Column(Integer, default=1)
    note = Column(Text)
    status = Column(SQLEnum(BookingStatus), nullable=False, default=BookingStatus.PENDING)
    reason = Column(Text)                                   # 拒绝/取消原因
    created_at = Column(DateTime, default=datetime.now)
    checked_in_at = Column(DateTime)
    checked_out_at = Column(DateTime)


class ServiceOrderRow(Base):
    """服务单"""
    __tablename__ = "service_orders"

    id = Column(String(40), primary_key=True)
    code = Column(String(20), unique=True, nullable=False)
    customer_name = Column(String(100), nullable=False)
    room_code = Column(String(40))
    status = Column(SQLEnum(ServiceOrderStatus), nullable=False, default=ServiceOrderStatus.PENDING)
    note = Column(Text)
    invoice_id = Column(String(40))
    created_at = Column(DateTime, default=datetime.now)
    total_amount = Column(Numeric(12, 2), default=0)       # 由明细派生，随写入同步

    items = relationship(
        "ServiceOrderItemRow", order_by="ServiceOrderItemRow.position",
        cascade="all, delete-orphan", back_populates="order"
    )


class ServiceOrderItemRow(Base):
    """服务单明细"""
    __tablename__ = "service_order_items"

    id = Column(String(40), primary_key=True)
    order_id = Column(String(40), ForeignKey("service_orders.id"), nullable=False)
    position = Column(Integer, default=0)
    service_name = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)

    order = relationship("ServiceOrderRow", back_populates="items")


class InvoiceRow(Base):
    """账单"""
    __tablename__ = "invoices"

    id = Column(String(40), primary_key=True)
    customer_name = Column(String(100), nullable=False)
    status = Column(SQLEnum(InvoiceStatus), nullable=False, default=InvoiceStatus.UNPAID)
    created_at = Column(DateTime, default=datetime.now)
    payment_method = Column(SQLEnum(PaymentMethod))
    reference_code = Column(String(100))
    paid_at = Column(DateTime)
    service_order_id = Column(String(40))
    subtotal = Column(Numeric(12, 2), default=0)
    tax = Column(Numeric(12, 2), default=0)
    total = Column(Numeric(12, 2), default=0)

    items = relationship(
        "InvoiceItemRow", order_by="InvoiceItemRow.position",
        cascade="all, delete-orphan", back_populates="invoice"
    )


class InvoiceItemRow(Base):
    """账单明细"""
    __tablename__ = "invoice_items"

    id = Column(String(40), primary_key=True)
    invoice_id = Column(String(40), ForeignKey("invoices.id"), nullable=False)
    position = Column(Integer, default=0)
    description = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), default=0)

    invoice = relationship("InvoiceRow", back_populates="items")


class StaffTaskRow(Base):
    """员工任务"""
    __tablename__ = "staff_tasks"

    id = Column(String(40), primary_key=True)
    title = Column(String(200), nullable=False)
    assignee = Column(String(100), nullable=False)
    due_date = Column(Date)
    priority = Column(SQLEnum(TaskPriority), nullable=False, default=TaskPriority.MEDIUM)
    status = Column(SQLEnum(TaskStatus), nullable=False, default=TaskStatus.TODO)
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.now)


class TicketRow(Base):
    """工单（报修、投诉等）"""
    __tablename__ = "tickets"

    id = Column(String(40), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    status = Column(SQLEnum(TicketStatus), nullable=False, default=TicketStatus.OPEN)
    assignee = Column(String(100))
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now)


class ServiceItemRow(Base):
    """服务目录"""
    __tablename__ = "service_items"

    id = Column(String(40), primary_key=True)
    name = Column(String(100), nullable=False)
    unit = Column(String(20), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    description = Column(Text)


class HistoryEntryRow(Base):
    """客户活动记录"""
    __tablename__ = "history_entries"

    id = Column(String(40), primary_key=True)
    customer_name = Column(String(100), nullable=False, index=True)
    type = Column("entry_type", SQLEnum(HistoryType), nullable=False)
    timestamp = Column(DateTime, default=datetime.now)
    reference_id = Column(String(40))
    note = Column(Text)
