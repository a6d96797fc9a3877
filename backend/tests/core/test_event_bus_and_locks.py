"""
事件总线与房间锁单元测试
"""
import threading
import time
import pytest
from datetime import date, datetime
from decimal import Decimal

from roomops.core.event_bus import EventBus, Event
from roomops.core.locks import KeyedLocks
from roomops.models.events import BookingEventData, InvoiceEventData


class TestEventBus:
    """事件总线测试"""

    @pytest.fixture
    def event_bus(self):
        """全局单例；只清历史，不动应用注册的订阅"""
        bus = EventBus()
        bus.clear_history()
        return bus

    @pytest.fixture
    def sample_event(self):
        return Event(
            event_type="test.event",
            timestamp=datetime.now(),
            data={"key": "value"},
            source="test"
        )

    def test_singleton(self):
        assert EventBus() is EventBus()

    def test_subscribe_and_publish(self, event_bus, sample_event):
        """测试订阅和发布"""
        received = []
        event_bus.subscribe("test.event", received.append)
        try:
            event_bus.publish(sample_event)
        finally:
            event_bus.unsubscribe("test.event", received.append)

        assert received == [sample_event]
        event_bus.publish(sample_event)
        assert len(received) == 1

    def test_duplicate_subscription_ignored(self, event_bus, sample_event):
        calls = []

        def handler(event):
            calls.append(event)

        event_bus.subscribe("test.event", handler)
        event_bus.subscribe("test.event", handler)
        try:
            event_bus.publish(sample_event)
        finally:
            event_bus.unsubscribe("test.event", handler)
        assert len(calls) == 1

    def test_handler_exception_isolation(self, event_bus, sample_event):
        """处理器异常不影响其他处理器"""
        received = []

        def failing_handler(event):
            raise RuntimeError("boom")

        event_bus.subscribe("test.event", failing_handler)
        event_bus.subscribe("test.event", received.append)
        try:
            event_bus.publish(sample_event)
        finally:
            event_bus.unsubscribe("test.event", failing_handler)
            event_bus.unsubscribe("test.event", received.append)
        assert received == [sample_event]

    def test_history(self, event_bus, sample_event):
        event_bus.publish(sample_event)
        other = Event(event_type="test.other", timestamp=datetime.now(), data={}, source="test")
        event_bus.publish(other)

        assert event_bus.get_history()[0] is other
        assert event_bus.get_history(event_type="test.event") == [sample_event]
        assert len(event_bus.get_history(limit=1)) == 1


class TestEventData:

    def test_dates_and_amounts_serialized(self):
        data = BookingEventData(booking_id="bk_1", start=date(2025, 1, 1), end=date(2025, 1, 3)).to_dict()
        assert data["start"] == "2025-01-01"
        assert isinstance(data["timestamp"], str)

        data = InvoiceEventData(invoice_id="inv_1", total=Decimal("30000")).to_dict()
        assert data["total"] == "30000"


class TestKeyedLocks:

    def test_same_key_is_serialized(self):
        locks = KeyedLocks()
        active = []
        overlaps = []

        def work():
            with locks.hold("room_1"):
                active.append(1)
                if len(active) > 1:
                    overlaps.append(True)
                time.sleep(0.01)
                active.pop()

        threads = [threading.Thread(target=work) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert overlaps == []
        assert len(locks) == 1

    def test_reentrant(self):
        locks = KeyedLocks()
        with locks.hold("room_1"):
            with locks.hold("room_1"):
                pass

    def test_keys_are_independent(self):
        locks = KeyedLocks()
        entered = threading.Event()

        def other():
            with locks.hold("room_2"):
                entered.set()

        with locks.hold("room_1"):
            t = threading.Thread(target=other)
            t.start()
            assert entered.wait(timeout=1)
            t.join()
        assert len(locks) == 2
