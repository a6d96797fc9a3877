"""
Ticket 记录与工单状态机

open → in_progress → done；处理中的工单可退回 open（清空处理人）。
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from roomops.core.state_machine import build_state_machine
from roomops.models.ontology import TicketStatus


TICKET_STATE_MACHINE = build_state_machine(
    "Ticket",
    states=list(TicketStatus),
    edges=[
        (TicketStatus.OPEN, TicketStatus.IN_PROGRESS, "assign"),
        (TicketStatus.IN_PROGRESS, TicketStatus.DONE, "complete"),
        (TicketStatus.IN_PROGRESS, TicketStatus.OPEN, "reset"),
    ],
    initial_state=TicketStatus.OPEN,
    final_states=[TicketStatus.DONE],
)


@dataclass
class Ticket:
    """工单"""
    id: str
    title: str
    description: Optional[str] = None
    status: TicketStatus = TicketStatus.OPEN
    assignee: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
