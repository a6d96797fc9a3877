"""
事件处理器 - 把入住、退房、服务完成写入客户活动记录
"""
from contextlib import AbstractContextManager
from typing import Callable, Dict
import logging

from roomops.core.event_bus import event_bus, Event, EventBus
from roomops.models.events import EventType
from roomops.models.ontology import HistoryType
from roomops.services.history_service import HistoryService
from roomops.stores import Stores, open_stores

logger = logging.getLogger(__name__)


class EventHandlers:
    """
    事件处理器集合

    支持依赖注入以便于测试：
    - stores_factory: 返回 Stores 上下文管理器的工厂，默认按配置打开存储
    """

    def __init__(self, stores_factory: Callable[[], AbstractContextManager] = None):
        self._stores_factory = stores_factory or open_stores
        self._registered = False

    @property
    def routes(self) -> Dict[str, Callable[[Event], None]]:
        return {
            EventType.BOOKING_CHECKED_IN.value: self.handle_booking_checked_in,
            EventType.BOOKING_CHECKED_OUT.value: self.handle_booking_checked_out,
            EventType.SERVICE_ORDER_COMPLETED.value: self.handle_service_completed,
        }

    def handle(self, event: Event) -> None:
        """按事件类型分发；可直接作为服务的 event_publisher 使用"""
        handler = self.routes.get(event.event_type)
        if handler:
            handler(event)

    def _record(self, event: Event, entry_type: HistoryType, reference_id: str, note: str) -> None:
        data = event.data
        customer_name = data.get("customer_name")
        if not customer_name:
            logger.warning(f"Invalid {event.event_type} event: missing customer_name")
            return

        with self._stores_factory() as stores:
            HistoryService(stores).record(
                customer_name=customer_name,
                entry_type=entry_type,
                reference_id=reference_id,
                note=note,
                timestamp=event.timestamp,
            )

    def handle_booking_checked_in(self, event: Event) -> None:
        """入住 -> check_in 记录"""
        data = event.data
        self._record(
            event, HistoryType.CHECK_IN, data.get("booking_id"),
            f"入住 {data.get('room_name', '')}（{data.get('booking_code', '')}）",
        )

    def handle_booking_checked_out(self, event: Event) -> None:
        """退房 -> check_out 记录"""
        data = event.data
        self._record(
            event, HistoryType.CHECK_OUT, data.get("booking_id"),
            f"退房 {data.get('room_name', '')}（{data.get('booking_code', '')}）",
        )

    def handle_service_completed(self, event: Event) -> None:
        """服务单完成 -> service 记录"""
        data = event.data
        self._record(
            event, HistoryType.SERVICE, data.get("order_id"),
            f"服务单 {data.get('order_code', '')} 完成，金额 {data.get('total_amount', '0')}",
        )

    def register_handlers(self, event_bus_instance: EventBus = None) -> None:
        """注册所有事件处理器"""
        if self._registered:
            return

        bus = event_bus_instance or event_bus
        for event_type, handler in self.routes.items():
            bus.subscribe(event_type, handler)

        self._registered = True
        logger.info("Event handlers registered successfully")

    def unregister_handlers(self, event_bus_instance: EventBus = None) -> None:
        """取消注册所有事件处理器（用于测试）"""
        bus = event_bus_instance or event_bus
        for event_type, handler in self.routes.items():
            bus.unsubscribe(event_type, handler)

        self._registered = False
        logger.info("Event handlers unregistered")


# 全局事件处理器实例
event_handlers = EventHandlers()


def register_event_handlers() -> None:
    """注册所有事件处理器（应用启动时调用）"""
    event_handlers.register_handlers()
