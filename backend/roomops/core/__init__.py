"""
roomops.core - 与具体实体无关的基础设施

- errors: 领域错误分类
- state_machine: 状态转换校验
- event_bus: 进程内事件总线
- store: 存储接口与内存实现
- locks: 按键加锁
"""
from roomops.core.errors import (
    DomainError, ValidationError, DateRangeInvalid, InvalidTransition,
    InvalidState, RoomUnavailable, RoomInUse, NotFound, AlreadyPaid, InvalidMethod,
)
from roomops.core.event_bus import Event, EventBus, event_bus
from roomops.core.store import Store, InMemoryStore, new_id

__all__ = [
    "DomainError", "ValidationError", "DateRangeInvalid", "InvalidTransition",
    "InvalidState", "RoomUnavailable", "RoomInUse", "NotFound", "AlreadyPaid",
    "InvalidMethod", "Event", "EventBus", "event_bus", "Store", "InMemoryStore",
    "new_id",
]
