"""
Tests for roomops/services/ticket_service.py
Covers: create_ticket, update_ticket, assign_ticket, complete_ticket,
        reset_ticket, list_tickets
"""
import pytest

from roomops.core.errors import InvalidState, NotFound, ValidationError
from roomops.models.events import EventType
from roomops.models.ontology import TicketStatus
from roomops.services.ticket_service import TicketService


# ── helpers ──────────────────────────────────────────────────────────

def _noop(event):
    pass


# ── tests ────────────────────────────────────────────────────────────

class TestCreateTicket:

    def test_new_ticket_is_open(self, stores, publish, events):
        ticket = TicketService(stores, publish).create_ticket(" 102 空调故障 ", "不制冷")
        assert ticket.title == "102 空调故障"
        assert ticket.status == TicketStatus.OPEN
        assert ticket.assignee is None
        assert events[0].event_type == EventType.TICKET_CREATED.value

    def test_title_required(self, stores):
        with pytest.raises(ValidationError):
            TicketService(stores, _noop).create_ticket("  ")

    def test_unknown_ticket(self, stores):
        with pytest.raises(NotFound):
            TicketService(stores, _noop).get_ticket("tk_missing")


class TestTicketFlow:

    def test_assign_then_complete(self, stores, publish, events):
        service = TicketService(stores, publish)
        ticket = service.create_ticket("三楼卫生反馈")

        ticket = service.assign_ticket(ticket.id, "王阿姨")
        assert ticket.status == TicketStatus.IN_PROGRESS
        assert ticket.assignee == "王阿姨"

        ticket = service.complete_ticket(ticket.id)
        assert ticket.status == TicketStatus.DONE
        assert stores.tickets.get(ticket.id).status == TicketStatus.DONE
        assert events[-1].event_type == EventType.TICKET_STATUS_CHANGED.value
        assert events[-1].data["old_status"] == "in_progress"
        assert events[-1].data["new_status"] == "done"

    def test_reset_clears_assignee(self, stores):
        service = TicketService(stores, _noop)
        ticket = service.create_ticket("三楼卫生反馈")
        service.assign_ticket(ticket.id, "王阿姨")

        ticket = service.reset_ticket(ticket.id)
        assert ticket.status == TicketStatus.OPEN
        assert ticket.assignee is None

    def test_open_ticket_cannot_complete(self, stores):
        service = TicketService(stores, _noop)
        ticket = service.create_ticket("三楼卫生反馈")
        with pytest.raises(InvalidState):
            service.complete_ticket(ticket.id)

    def test_done_ticket_is_final(self, stores):
        service = TicketService(stores, _noop)
        ticket = service.create_ticket("三楼卫生反馈")
        service.assign_ticket(ticket.id, "王阿姨")
        service.complete_ticket(ticket.id)

        with pytest.raises(InvalidState):
            service.reset_ticket(ticket.id)
        with pytest.raises(InvalidState):
            service.assign_ticket(ticket.id, "李师傅")
        with pytest.raises(InvalidState):
            service.update_ticket(ticket.id, title="改标题")

    def test_assign_requires_name(self, stores):
        service = TicketService(stores, _noop)
        ticket = service.create_ticket("三楼卫生反馈")
        with pytest.raises(ValidationError):
            service.assign_ticket(ticket.id, "")
        assert service.get_ticket(ticket.id).status == TicketStatus.OPEN


class TestListTickets:

    def test_filter_by_status_and_title(self, stores):
        service = TicketService(stores, _noop)
        a = service.create_ticket("102 空调故障")
        service.create_ticket("三楼卫生反馈")
        service.assign_ticket(a.id, "李师傅")

        assert [t.title for t in service.list_tickets(status="in_progress")] == ["102 空调故障"]
        assert [t.title for t in service.list_tickets(query="卫生")] == ["三楼卫生反馈"]
        assert len(service.list_tickets()) == 2

    def test_update_title_and_description(self, stores):
        service = TicketService(stores, _noop)
        ticket = service.create_ticket("空调")
        ticket = service.update_ticket(ticket.id, title="102 空调故障", description="不制冷")
        loaded = service.get_ticket(ticket.id)
        assert loaded.title == "102 空调故障"
        assert loaded.description == "不制冷"
