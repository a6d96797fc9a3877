"""
事件总线 - 内存级发布/订阅
服务在写入成功后发布领域事件，历史记录等模块订阅处理
"""
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from collections import deque
import logging
import threading
import uuid

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """事件"""
    event_type: str
    timestamp: datetime
    data: Dict[str, Any]
    source: str  # 触发来源（服务名）
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)


EventPublisher = Callable[[Event], None]


class EventBus:
    """
    内存级事件总线（线程安全单例）

    使用方式：
    1. 订阅事件：event_bus.subscribe("booking.checked_in", handler)
    2. 发布事件：event_bus.publish(Event(...))
    3. 取消订阅：event_bus.unsubscribe("booking.checked_in", handler)
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._subscribers: Dict[str, List[Callable]] = {}
        self._event_history: deque = deque(maxlen=100)  # 保留最近100条用于调试
        self._subscriber_lock = threading.Lock()
        self._initialized = True
        logger.info("EventBus initialized")

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """订阅事件，重复订阅同一处理器会被忽略"""
        with self._subscriber_lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)
                logger.info(f"Handler {_name(handler)} subscribed to {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable) -> None:
        """取消订阅"""
        with self._subscriber_lock:
            if handler in self._subscribers.get(event_type, []):
                self._subscribers[event_type].remove(handler)
                logger.info(f"Handler {_name(handler)} unsubscribed from {event_type}")

    def publish(self, event: Event) -> None:
        """
        发布事件（同步执行所有处理器）

        处理器异常只记录日志，不影响发布方和其他处理器
        """
        self._event_history.append(event)

        with self._subscriber_lock:
            handlers = list(self._subscribers.get(event.event_type, []))

        if handlers:
            logger.debug(f"Publishing {event.event_type} to {len(handlers)} handlers")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler {_name(handler)} error for {event.event_type}: {e}",
                    exc_info=True
                )

    def get_history(self, event_type: Optional[str] = None, limit: int = 50) -> List[Event]:
        """获取最近的事件（最新的在前）"""
        history = list(self._event_history)
        if event_type:
            history = [e for e in history if e.event_type == event_type]
        return list(reversed(history))[:limit]

    def clear_subscribers(self) -> None:
        """清空所有订阅（用于测试）"""
        with self._subscriber_lock:
            self._subscribers.clear()

    def clear_history(self) -> None:
        """清空事件历史"""
        self._event_history.clear()


def _name(handler: Callable) -> str:
    return getattr(handler, "__qualname__", repr(handler))


# 全局事件总线实例
event_bus = EventBus()
