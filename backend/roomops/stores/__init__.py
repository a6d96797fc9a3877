"""
存储装配

Stores 汇总所有实体的 Store，服务通过它读写数据：
- sql_stores(db): 基于 SQLAlchemy 会话（生产）
- memory_stores(): 进程内存（测试、演示）
"""
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional
import logging

from sqlalchemy.orm import Session

from roomops.config import settings
from roomops.database import SessionLocal
from roomops.core.store import InMemoryStore, Store
from roomops.domain import (
    Room, Booking, ServiceOrder, LineItem, Invoice, InvoiceItem,
    StaffTask, Ticket, ServiceItem, RoomType, Building, HistoryEntry,
)
from roomops.models.ontology import (
    RoomRow, BookingRow, ServiceOrderRow, ServiceOrderItemRow, InvoiceRow,
    InvoiceItemRow, StaffTaskRow, TicketRow, ServiceItemRow, RoomTypeRow, BuildingRow,
    HistoryEntryRow,
)
from roomops.stores.sql_store import ChildSpec, RecordMapper, SqlAlchemyStore

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    """一次请求（或一个测试）使用的全部存储"""
    rooms: Store[Room]
    bookings: Store[Booking]
    service_orders: Store[ServiceOrder]
    invoices: Store[Invoice]
    tasks: Store[StaffTask]
    tickets: Store[Ticket]
    service_items: Store[ServiceItem]
    room_types: Store[RoomType]
    buildings: Store[Building]
    history: Store[HistoryEntry]
    session: Optional[Session] = None

    @contextmanager
    def transaction(self) -> Iterator["Stores"]:
        """
        工作单元：块内的写入一起提交，异常时回滚

        内存存储每次写入立即生效；服务先校验后写入，校验失败时不会留下半截数据。
        """
        if self.session is None:
            yield self
            return
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise


# ============== 映射 ==============

MAPPERS = {
    "rooms": RecordMapper(RoomRow, Room, order_by="created_at"),
    "bookings": RecordMapper(BookingRow, Booking, order_by="created_at"),
    "service_orders": RecordMapper(
        ServiceOrderRow, ServiceOrder,
        children={"items": ChildSpec(ServiceOrderItemRow, LineItem)},
        derived={"total_amount": lambda order: order.total_amount},
        order_by="created_at",
    ),
    "invoices": RecordMapper(
        InvoiceRow, Invoice,
        children={"items": ChildSpec(InvoiceItemRow, InvoiceItem, derived={"total": lambda item: item.total})},
        derived={
            "subtotal": lambda invoice: invoice.subtotal,
            "tax": lambda invoice: invoice.tax,
            "total": lambda invoice: invoice.total,
        },
        order_by="created_at",
    ),
    "tasks": RecordMapper(StaffTaskRow, StaffTask, order_by="created_at"),
    "tickets": RecordMapper(TicketRow, Ticket, order_by="created_at"),
    "service_items": RecordMapper(ServiceItemRow, ServiceItem, order_by="name"),
    "room_types": RecordMapper(RoomTypeRow, RoomType, order_by="code"),
    "buildings": RecordMapper(BuildingRow, Building, order_by="name"),
    "history": RecordMapper(HistoryEntryRow, HistoryEntry, order_by="timestamp"),
}

ENTITY_NAMES = {
    "rooms": "Room",
    "bookings": "Booking",
    "service_orders": "ServiceOrder",
    "invoices": "Invoice",
    "tasks": "StaffTask",
    "tickets": "Ticket",
    "service_items": "ServiceItem",
    "room_types": "RoomType",
    "buildings": "Building",
    "history": "HistoryEntry",
}


def sql_stores(db: Session) -> Stores:
    """基于数据库会话的存储"""
    return Stores(
        session=db,
        **{name: SqlAlchemyStore(db, mapper, ENTITY_NAMES[name]) for name, mapper in MAPPERS.items()}
    )


def memory_stores() -> Stores:
    """全新的内存存储"""
    return Stores(**{name: InMemoryStore(ENTITY_NAMES[name]) for name in MAPPERS})


_shared_memory: Optional[Stores] = None


def shared_memory_stores() -> Stores:
    """STORE_BACKEND=memory 时整个进程共用一份内存存储"""
    global _shared_memory
    if _shared_memory is None:
        _shared_memory = memory_stores()
        logger.info("Using in-memory stores")
    return _shared_memory


@contextmanager
def open_stores() -> Iterator[Stores]:
    """按配置打开存储，数据库会话在退出时关闭"""
    if settings.STORE_BACKEND == "memory":
        yield shared_memory_stores()
        return

    db = SessionLocal()
    try:
        yield sql_stores(db)
    finally:
        db.close()


def get_stores() -> Iterator[Stores]:
    """依赖注入：获取存储"""
    with open_stores() as stores:
        yield stores


__all__ = [
    "Stores", "sql_stores", "memory_stores", "shared_memory_stores",
    "open_stores", "get_stores",
]
