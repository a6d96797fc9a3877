"""
工单服务 - 报修、投诉等工单的登记与处理
分配即开始处理，处理中可完成或退回
"""
from typing import List, Optional, Callable
from datetime import datetime
import logging

from roomops.core.errors import InvalidState
from roomops.core.event_bus import event_bus, Event
from roomops.core.store import new_id
from roomops.domain.ticket import Ticket, TICKET_STATE_MACHINE
from roomops.domain.validation import require_text, optional_text, parse_enum
from roomops.models.events import EventType, TicketEventData
from roomops.models.ontology import TicketStatus
from roomops.stores import Stores

logger = logging.getLogger(__name__)


class TicketService:
    """工单服务"""

    def __init__(self, stores: Stores, event_publisher: Callable[[Event], None] = None):
        self.stores = stores
        self._publish_event = event_publisher or event_bus.publish

    def list_tickets(self, status: Optional[TicketStatus] = None,
                     query: Optional[str] = None) -> List[Ticket]:
        """获取工单列表（新建在前），query 匹配标题"""
        criteria = {}
        if status is not None:
            criteria["status"] = parse_enum(TicketStatus, status, "status")
        tickets = self.stores.tickets.list(**criteria)
        if query:
            keyword = query.strip().lower()
            tickets = [t for t in tickets if keyword in t.title.lower()]
        return sorted(tickets, key=lambda t: t.created_at, reverse=True)

    def get_ticket(self, ticket_id: str) -> Ticket:
        return self.stores.tickets.require(ticket_id)

    def create_ticket(self, title: str, description: Optional[str] = None,
                      assignee: Optional[str] = None) -> Ticket:
        """登记工单，状态为 open；处理人可预先填写"""
        ticket = Ticket(
            id=new_id("tk"),
            title=require_text(title, "工单标题"),
            description=optional_text(description),
            assignee=optional_text(assignee),
        )
        with self.stores.transaction():
            self.stores.tickets.insert(ticket)

        logger.info(f"Ticket created: {ticket.id} {ticket.title}")
        self._publish(EventType.TICKET_CREATED, ticket, None)
        return ticket

    def update_ticket(self, ticket_id: str, title: Optional[str] = None,
                      description: Optional[str] = None) -> Ticket:
        """修改标题、描述；已完成的工单不能修改"""
        ticket = self.get_ticket(ticket_id)
        if TICKET_STATE_MACHINE.is_final(ticket.status):
            raise InvalidState(
                f"工单 {ticket.title} 已完成，不能修改",
                current=ticket.status.value, entity="Ticket", entity_id=ticket.id,
            )
        if title is not None:
            ticket.title = require_text(title, "工单标题")
        if description is not None:
            ticket.description = optional_text(description)
        ticket.updated_at = datetime.now()
        with self.stores.transaction():
            self.stores.tickets.update(ticket)
        return ticket

    def assign_ticket(self, ticket_id: str, assignee: str) -> Ticket:
        """分配处理人，工单进入处理中"""
        assignee = require_text(assignee, "处理人")
        return self._fire(ticket_id, "assign", assignee=assignee)

    def complete_ticket(self, ticket_id: str) -> Ticket:
        """完成工单"""
        return self._fire(ticket_id, "complete")

    def reset_ticket(self, ticket_id: str) -> Ticket:
        """退回待处理，清空处理人"""
        return self._fire(ticket_id, "reset", assignee=None)

    def _fire(self, ticket_id: str, trigger: str, **changes) -> Ticket:
        ticket = self.get_ticket(ticket_id)
        old_status = ticket.status
        ticket.status = TicketStatus(TICKET_STATE_MACHINE.fire(old_status, trigger))
        for name, value in changes.items():
            setattr(ticket, name, value)
        ticket.updated_at = datetime.now()
        with self.stores.transaction():
            self.stores.tickets.update(ticket)

        logger.info(f"Ticket {ticket.id}: {old_status.value} -> {ticket.status.value}")
        self._publish(EventType.TICKET_STATUS_CHANGED, ticket, old_status)
        return ticket

    def _publish(self, event_type: EventType, ticket: Ticket,
                 old_status: Optional[TicketStatus]) -> None:
        self._publish_event(Event(
            event_type=event_type.value,
            timestamp=datetime.now(),
            data=TicketEventData(
                ticket_id=ticket.id,
                title=ticket.title,
                assignee=ticket.assignee,
                old_status=old_status.value if old_status else "",
                new_status=ticket.status.value,
            ).to_dict(),
            source="ticket_service"
        ))
