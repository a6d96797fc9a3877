"""
预订服务 - 预订台账
管理 Booking 记录：创建、审批、入住、退房、取消

同一房间的预订变更都在房间锁内执行，冲突检查与写入之间不会插入其他审批。
"""
from typing import List, Optional, Callable
from datetime import date, datetime
import logging

from roomops.core.errors import DateRangeInvalid, InvalidState, RoomUnavailable, ValidationError
from roomops.core.event_bus import event_bus, Event
from roomops.core.locks import room_locks
from roomops.core.store import new_id
from roomops.domain.booking import Booking, BOOKING_STATE_MACHINE
from roomops.domain.room import Room
from roomops.domain.validation import require_text, optional_text, require_positive_int, parse_enum
from roomops.models.events import EventType, BookingEventData, RoomStatusChangedData
from roomops.models.ontology import BookingStatus, RoomStatus
from roomops.stores import Stores

logger = logging.getLogger(__name__)


class BookingService:
    """预订服务"""

    def __init__(self, stores: Stores, event_publisher: Callable[[Event], None] = None):
        self.stores = stores
        self._publish_event = event_publisher or event_bus.publish

    def _generate_booking_code(self) -> str:
        """生成预订号：BK + 日期 + 序号"""
        prefix = f"BK{datetime.now().strftime('%Y%m%d')}"
        codes = {b.code for b in self.stores.bookings.list() if b.code.startswith(prefix)}
        seq = len(codes) + 1
        while f"{prefix}{str(seq).zfill(3)}" in codes:
            seq += 1
        return f"{prefix}{str(seq).zfill(3)}"

    # ============== 查询 ==============

    def list_bookings(self, status: Optional[BookingStatus] = None,
                      room_id: Optional[str] = None,
                      query: Optional[str] = None,
                      date_from: Optional[date] = None,
                      date_to: Optional[date] = None) -> List[Booking]:
        """
        获取预订列表

        query 匹配预订号、客人姓名、房间名（不区分大小写）；
        date_from / date_to 按入住日期过滤（含两端）。
        """
        criteria = {}
        if status is not None:
            criteria["status"] = parse_enum(BookingStatus, status, "status")
        if room_id:
            criteria["room_id"] = room_id
        bookings = self.stores.bookings.list(**criteria)

        if query:
            keyword = query.strip().lower()
            bookings = [
                b for b in bookings
                if keyword in b.code.lower()
                or keyword in b.customer_name.lower()
                or keyword in (b.room_name or "").lower()
            ]
        if date_from:
            bookings = [b for b in bookings if b.start >= date_from]
        if date_to:
            bookings = [b for b in bookings if b.start <= date_to]

        return sorted(bookings, key=lambda b: (b.start, b.created_at), reverse=True)

    def get_booking(self, booking_id: str) -> Booking:
        """获取单个预订"""
        return self.stores.bookings.require(booking_id)

    def find_conflicts(self, room_id: str, start: date, end: date,
                       exclude_id: Optional[str] = None) -> List[Booking]:
        """该房间与 [start, end) 重叠的有效预订"""
        return [
            b for b in self.stores.bookings.list(room_id=room_id)
            if b.is_active and b.id != exclude_id and b.overlaps(start, end)
        ]

    # ============== 变更 ==============

    def create_booking(self, room_id: str, customer_name: str, start: date, end: date,
                       guests: int = 1, note: Optional[str] = None) -> Booking:
        """创建预订（待审批）"""
        customer_name = require_text(customer_name, "客人姓名")
        if start is None or end is None:
            raise ValidationError("入住日期和离店日期不能为空")
        if end <= start:
            raise DateRangeInvalid("离店日期必须晚于入住日期", entity="Booking")

        with room_locks.hold(room_id):
            room = self.stores.rooms.require(room_id)
            guests = require_positive_int(guests, "入住人数")
            if guests > room.capacity:
                raise ValidationError(
                    f"入住人数必须在 1 到 {room.capacity} 之间", entity="Booking"
                )
            self._ensure_free(room, start, end)

            booking = Booking(
                id=new_id("bk"),
                code=self._generate_booking_code(),
                room_id=room.id,
                room_name=room.name,
                customer_name=customer_name,
                start=start,
                end=end,
                guests=guests,
                note=optional_text(note),
            )
            with self.stores.transaction():
                self.stores.bookings.insert(booking)

        logger.info(f"Booking created: {booking.code} room={room.name} {start}~{end}")
        self._publish(EventType.BOOKING_CREATED, booking, None)
        return booking

    def approve_booking(self, booking_id: str) -> Booking:
        """审批通过：重新检查冲突与维修状态"""
        room_id = self.get_booking(booking_id).room_id
        with room_locks.hold(room_id):
            booking = self.get_booking(booking_id)
            old_status = booking.status
            new_status = BOOKING_STATE_MACHINE.fire(old_status, "approve")

            room = self.stores.rooms.require(room_id)
            if room.status == RoomStatus.MAINTENANCE:
                raise RoomUnavailable(
                    f"房间 {room.name} 正在维修，无法确认预订",
                    entity="Room", entity_id=room.id,
                )
            self._ensure_free(room, booking.start, booking.end, exclude_id=booking.id)

            booking.status = BookingStatus(new_status)
            with self.stores.transaction():
                self.stores.bookings.update(booking)

        self._publish(EventType.BOOKING_APPROVED, booking, old_status)
        return booking

    def reject_booking(self, booking_id: str, reason: str) -> Booking:
        """拒绝预订，必须填写原因"""
        reason = require_text(reason, "拒绝原因")
        room_id = self.get_booking(booking_id).room_id
        with room_locks.hold(room_id):
            booking = self.get_booking(booking_id)
            old_status = booking.status
            booking.status = BookingStatus(BOOKING_STATE_MACHINE.fire(old_status, "reject"))
            booking.reason = reason
            with self.stores.transaction():
                self.stores.bookings.update(booking)

        self._publish(EventType.BOOKING_REJECTED, booking, old_status, reason=reason)
        return booking

    def check_in(self, booking_id: str) -> Booking:
        """办理入住：预订 -> checked_in，房间 -> occupied"""
        room_id = self.get_booking(booking_id).room_id
        with room_locks.hold(room_id):
            booking = self.get_booking(booking_id)
            old_status = booking.status
            new_status = BOOKING_STATE_MACHINE.fire(old_status, "check_in")

            room = self.stores.rooms.require(room_id)
            if room.status == RoomStatus.MAINTENANCE:
                raise RoomUnavailable(
                    f"房间 {room.name} 正在维修，无法入住",
                    entity="Room", entity_id=room.id,
                )
            if room.status == RoomStatus.OCCUPIED and room.current_booking_id != booking.id:
                raise RoomUnavailable(
                    f"房间 {room.name} 已有住客 {room.current_guest}",
                    entity="Room", entity_id=room.id,
                )

            old_room_status = room.status
            booking.status = BookingStatus(new_status)
            booking.checked_in_at = datetime.now()
            room.occupy(booking.id, booking.customer_name)
            with self.stores.transaction():
                self.stores.bookings.update(booking)
                self.stores.rooms.update(room)

        logger.info(f"Checked in: {booking.code} room={room.name} guest={booking.customer_name}")
        self._publish(EventType.BOOKING_CHECKED_IN, booking, old_status)
        self._publish_room(room, old_room_status, booking.id)
        return booking

    def check_out(self, booking_id: str) -> Booking:
        """办理退房：预订 -> checked_out，房间 -> cleaning"""
        room_id = self.get_booking(booking_id).room_id
        with room_locks.hold(room_id):
            booking = self.get_booking(booking_id)
            old_status = booking.status
            booking.status = BookingStatus(BOOKING_STATE_MACHINE.fire(old_status, "check_out"))
            booking.checked_out_at = datetime.now()

            room = self.stores.rooms.get(room_id)
            old_room_status = room.status if room else None
            with self.stores.transaction():
                self.stores.bookings.update(booking)
                if room is not None:
                    room.release(RoomStatus.CLEANING)
                    self.stores.rooms.update(room)

        logger.info(f"Checked out: {booking.code}")
        self._publish(EventType.BOOKING_CHECKED_OUT, booking, old_status)
        if room is not None:
            self._publish_room(room, old_room_status, booking.id)
        return booking

    def cancel_booking(self, booking_id: str, reason: Optional[str] = None) -> Booking:
        """
        取消预订

        已取消的预订再次取消直接返回；取消在住预订时房间转为待清洁。
        """
        room_id = self.get_booking(booking_id).room_id
        with room_locks.hold(room_id):
            booking = self.get_booking(booking_id)
            old_status = booking.status
            if old_status == BookingStatus.CANCELLED:
                return booking
            if BOOKING_STATE_MACHINE.is_final(old_status):
                raise InvalidState(
                    f"预订 {booking.code} 状态为 {old_status.value}，无法取消",
                    current=old_status.value, target=BookingStatus.CANCELLED.value,
                    entity="Booking", entity_id=booking.id,
                )
            booking.status = BookingStatus(BOOKING_STATE_MACHINE.fire(old_status, "cancel"))
            booking.reason = optional_text(reason)

            room = None
            if old_status == BookingStatus.CHECKED_IN:
                room = self.stores.rooms.get(room_id)
            old_room_status = room.status if room else None
            with self.stores.transaction():
                self.stores.bookings.update(booking)
                if room is not None and room.current_booking_id == booking.id:
                    room.release(RoomStatus.CLEANING)
                    self.stores.rooms.update(room)
                else:
                    room = None

        self._publish(EventType.BOOKING_CANCELLED, booking, old_status, reason=booking.reason or "")
        if room is not None:
            self._publish_room(room, old_room_status, booking.id)
        return booking

    # ============== 内部 ==============

    def _ensure_free(self, room: Room, start: date, end: date,
                     exclude_id: Optional[str] = None) -> None:
        conflicts = self.find_conflicts(room.id, start, end, exclude_id=exclude_id)
        if conflicts:
            other = conflicts[0]
            raise RoomUnavailable(
                f"房间 {room.name} 在 {other.start}~{other.end} 已被预订 {other.code} 占用",
                entity="Room", entity_id=room.id,
            )

    def _publish(self, event_type: EventType, booking: Booking,
                 old_status: Optional[BookingStatus], reason: str = "") -> None:
        self._publish_event(Event(
            event_type=event_type.value,
            timestamp=datetime.now(),
            data=BookingEventData(
                booking_id=booking.id,
                booking_code=booking.code,
                room_id=booking.room_id,
                room_name=booking.room_name or "",
                customer_name=booking.customer_name,
                start=booking.start,
                end=booking.end,
                old_status=old_status.value if old_status else "",
                new_status=booking.status.value,
                reason=reason,
            ).to_dict(),
            source="booking_service"
        ))

    def _publish_room(self, room: Room, old_status: RoomStatus, booking_id: str) -> None:
        self._publish_event(Event(
            event_type=EventType.ROOM_STATUS_CHANGED.value,
            timestamp=datetime.now(),
            data=RoomStatusChangedData(
                room_id=room.id,
                room_name=room.name,
                old_status=old_status.value,
                new_status=room.status.value,
                booking_id=booking_id,
            ).to_dict(),
            source="booking_service"
        ))
