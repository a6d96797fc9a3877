"""
房间服务 - 房态跟踪
管理 Room 记录，房态变更发布事件
"""
from typing import List, Optional, Callable
from datetime import date, datetime
import logging

from roomops.core.errors import InvalidTransition, RoomInUse, not_found
from roomops.core.event_bus import event_bus, Event
from roomops.core.store import new_id
from roomops.domain.booking import ACTIVE_STATUSES
from roomops.domain.room import Room, ROOM_STATE_MACHINE
from roomops.domain.validation import (
    require_text, optional_text, require_positive_int, parse_enum,
)
from roomops.models.events import EventType, RoomStatusChangedData
from roomops.models.ontology import RoomStatus, BookingStatus
from roomops.stores import Stores

logger = logging.getLogger(__name__)


class RoomService:
    """房间服务"""

    def __init__(self, stores: Stores, event_publisher: Callable[[Event], None] = None):
        self.stores = stores
        # 支持依赖注入事件发布器，便于测试
        self._publish_event = event_publisher or event_bus.publish

    # ============== 查询 ==============

    def list_rooms(self, status: Optional[RoomStatus] = None,
                   building: Optional[str] = None,
                   room_type_id: Optional[str] = None) -> List[Room]:
        """获取房间列表，可按房态、楼栋、房型过滤"""
        criteria = {}
        if status is not None:
            criteria["status"] = parse_enum(RoomStatus, status, "status")
        if building:
            criteria["building"] = building
        if room_type_id:
            criteria["room_type_id"] = room_type_id
        rooms = self.stores.rooms.list(**criteria)
        return sorted(rooms, key=lambda r: (r.building or "", r.name))

    def get_room(self, room_id: str) -> Room:
        """获取单个房间"""
        return self.stores.rooms.require(room_id)

    def get_status_summary(self) -> dict:
        """房态统计"""
        summary = {status.value: 0 for status in RoomStatus}
        rooms = self.stores.rooms.list()
        for room in rooms:
            summary[room.status.value] += 1
        summary["total"] = len(rooms)
        return summary

    # ============== 维护 ==============

    def create_room(self, name: str, capacity: int, building: Optional[str] = None,
                    room_type_id: Optional[str] = None) -> Room:
        """创建房间，初始为空闲"""
        room = Room(
            id=new_id("room"),
            name=require_text(name, "房间名称"),
            capacity=require_positive_int(capacity, "容纳人数"),
            building=optional_text(building),
            room_type_id=self._room_type_ref(room_type_id),
        )
        with self.stores.transaction():
            self.stores.rooms.insert(room)
        logger.info(f"Room created: {room.id} {room.name}")
        self._publish(EventType.ROOM_CREATED, room, None)
        return room

    def update_room(self, room_id: str, name: Optional[str] = None,
                    capacity: Optional[int] = None, building: Optional[str] = None,
                    room_type_id: Optional[str] = None) -> Room:
        """更新房间基本信息（不含房态）"""
        room = self.get_room(room_id)
        if name is not None:
            room.name = require_text(name, "房间名称")
        if capacity is not None:
            room.capacity = require_positive_int(capacity, "容纳人数")
        if building is not None:
            room.building = optional_text(building)
        if room_type_id is not None:
            room.room_type_id = self._room_type_ref(room_type_id)

        with self.stores.transaction():
            self.stores.rooms.update(room)
        return room

    def update_room_status(self, room_id: str, status: RoomStatus,
                           booking_id: Optional[str] = None, reason: str = "") -> Room:
        """
        更新房态

        规则：
        - 入住中不能再次设为入住
        - 设为入住必须引用该房间的有效预订（已确认/已入住）
        - 仍有已入住预订时不能手动离开入住状态，需走退房
        - 今天仍被有效预订占用时不能设为空闲或维修
        - 离开入住状态时清空住客
        """
        target = parse_enum(RoomStatus, status, "status")
        room = self.get_room(room_id)
        old_status = room.status

        if old_status == target and target != RoomStatus.OCCUPIED:
            return room

        bookings = self.stores.bookings.list(room_id=room_id)
        if target != RoomStatus.OCCUPIED:
            staying = [b for b in bookings if b.status == BookingStatus.CHECKED_IN]
            if staying:
                raise InvalidTransition(
                    f"房间仍有在住客人 {staying[0].customer_name}，请通过退房操作",
                    current=old_status.value, target=target.value, entity="Room", entity_id=room_id,
                )

        today = date.today()
        booked_today = [b for b in bookings if b.status in ACTIVE_STATUSES and b.covers(today)]
        ROOM_STATE_MACHINE.validate(old_status, target, context={"booked_today": bool(booked_today)})

        if target == RoomStatus.OCCUPIED:
            if not booking_id:
                raise InvalidTransition(
                    "设为入住需要关联一个有效预订",
                    current=old_status.value, target=target.value, entity="Room", entity_id=room_id,
                )
            booking = self.stores.bookings.get(booking_id)
            if booking is None:
                raise not_found("Booking", booking_id)
            if booking.room_id != room_id or booking.status not in ACTIVE_STATUSES:
                raise InvalidTransition(
                    f"预订 {booking.code} 不是该房间的有效预订",
                    current=old_status.value, target=target.value, entity="Room", entity_id=room_id,
                )
            room.occupy(booking.id, booking.customer_name)
        else:
            room.release(target)

        with self.stores.transaction():
            self.stores.rooms.update(room)

        self._publish(EventType.ROOM_STATUS_CHANGED, room, old_status,
                      booking_id=room.current_booking_id, reason=reason)
        return room

    def delete_room(self, room_id: str) -> bool:
        """删除房间；仍被有效预订引用时不可删除"""
        room = self.get_room(room_id)
        active = [b for b in self.stores.bookings.list(room_id=room_id) if b.is_active]
        if active:
            raise RoomInUse(
                f"房间 {room.name} 仍有 {len(active)} 个有效预订，无法删除",
                entity="Room", entity_id=room_id,
            )

        with self.stores.transaction():
            self.stores.rooms.delete(room_id)
        logger.info(f"Room deleted: {room_id}")
        self._publish(EventType.ROOM_DELETED, room, None)
        return True

    def _room_type_ref(self, room_type_id: Optional[str]) -> Optional[str]:
        """空串表示不设房型；否则房型必须存在"""
        room_type_id = optional_text(room_type_id)
        if room_type_id:
            self.stores.room_types.require(room_type_id)
        return room_type_id

    def _publish(self, event_type: EventType, room: Room, old_status: Optional[RoomStatus],
                 booking_id: Optional[str] = None, reason: str = "") -> None:
        self._publish_event(Event(
            event_type=event_type.value,
            timestamp=datetime.now(),
            data=RoomStatusChangedData(
                room_id=room.id,
                room_name=room.name,
                old_status=old_status.value if old_status else "",
                new_status=room.status.value,
                booking_id=booking_id,
                reason=reason,
            ).to_dict(),
            source="room_service"
        ))
