"""
Room 记录与房态状态机
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from roomops.core.state_machine import build_state_machine
from roomops.models.ontology import RoomStatus


def _not_booked_today(context: dict) -> bool:
    """今天仍被有效预订占用的房间不能设为空闲或维修"""
    return not context.get("booked_today", False)


ROOM_STATE_MACHINE = build_state_machine(
    "Room",
    states=list(RoomStatus),
    edges=[
        (RoomStatus.AVAILABLE, RoomStatus.OCCUPIED, "check_in"),
        (RoomStatus.AVAILABLE, RoomStatus.CLEANING, "mark_dirty"),
        (RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE, "mark_maintenance", _not_booked_today),
        (RoomStatus.CLEANING, RoomStatus.OCCUPIED, "check_in"),
        (RoomStatus.CLEANING, RoomStatus.AVAILABLE, "mark_clean", _not_booked_today),
        (RoomStatus.CLEANING, RoomStatus.MAINTENANCE, "mark_maintenance", _not_booked_today),
        (RoomStatus.OCCUPIED, RoomStatus.CLEANING, "check_out"),
        (RoomStatus.OCCUPIED, RoomStatus.AVAILABLE, "release", _not_booked_today),
        (RoomStatus.OCCUPIED, RoomStatus.MAINTENANCE, "mark_maintenance", _not_booked_today),
        (RoomStatus.MAINTENANCE, RoomStatus.AVAILABLE, "complete_maintenance", _not_booked_today),
        (RoomStatus.MAINTENANCE, RoomStatus.CLEANING, "mark_dirty"),
    ],
    initial_state=RoomStatus.AVAILABLE,
)


@dataclass
class Room:
    """房间"""
    id: str
    name: str
    capacity: int
    building: Optional[str] = None
    room_type_id: Optional[str] = None
    status: RoomStatus = RoomStatus.AVAILABLE
    current_guest: Optional[str] = None
    current_booking_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def occupy(self, booking_id: str, guest: str) -> None:
        self.status = RoomStatus.OCCUPIED
        self.current_booking_id = booking_id
        self.current_guest = guest

    def release(self, status: RoomStatus) -> None:
        """离开入住状态时清空住客"""
        self.status = status
        self.current_booking_id = None
        self.current_guest = None
