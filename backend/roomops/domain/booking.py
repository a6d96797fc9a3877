"""
Booking 记录、预订状态机与区间重叠判断

日期区间是半开区间 [start, end)：前一单的离店日等于后一单的入住日
不算冲突（同日周转）。
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from roomops.core.state_machine import build_state_machine
from roomops.models.ontology import BookingStatus


# 占用房间的状态：参与冲突检查
ACTIVE_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN)

BOOKING_STATE_MACHINE = build_state_machine(
    "Booking",
    states=list(BookingStatus),
    edges=[
        (BookingStatus.PENDING, BookingStatus.CONFIRMED, "approve"),
        (BookingStatus.PENDING, BookingStatus.REJECTED, "reject"),
        (BookingStatus.PENDING, BookingStatus.CANCELLED, "cancel"),
        (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN, "check_in"),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED, "cancel"),
        (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT, "check_out"),
        (BookingStatus.CHECKED_IN, BookingStatus.CANCELLED, "cancel"),
    ],
    initial_state=BookingStatus.PENDING,
    final_states=[BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED, BookingStatus.REJECTED],
)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """半开区间重叠判断"""
    return a_start < b_end and b_start < a_end


@dataclass
class Booking:
    """预订"""
    id: str
    code: str
    room_id: str
    customer_name: str
    start: date
    end: date
    room_name: Optional[str] = None
    guests: int = 1
    note: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    reason: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    checked_in_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    def overlaps(self, start: date, end: date) -> bool:
        return ranges_overlap(self.start, self.end, start, end)

    def covers(self, day: date) -> bool:
        """day 当晚是否在预订内"""
        return self.start <= day < self.end
