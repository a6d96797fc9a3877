"""
工单路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from roomops.core.errors import DomainError
from roomops.models.ontology import TicketStatus
from roomops.models.schemas import TicketCreate, TicketUpdate, TicketAssign, TicketResponse
from roomops.routers.errors import as_http_exception
from roomops.services.ticket_service import TicketService
from roomops.stores import Stores, get_stores

router = APIRouter(prefix="/tickets", tags=["工单管理"])


@router.get("", response_model=List[TicketResponse])
def list_tickets(
    status: Optional[TicketStatus] = None,
    query: Optional[str] = None,
    stores: Stores = Depends(get_stores)
):
    """获取工单列表"""
    tickets = TicketService(stores).list_tickets(status, query)
    return [TicketResponse.model_validate(t) for t in tickets]


@router.post("", response_model=TicketResponse)
def create_ticket(data: TicketCreate, stores: Stores = Depends(get_stores)):
    """登记工单"""
    try:
        ticket = TicketService(stores).create_ticket(data.title, data.description, data.assignee)
    except DomainError as e:
        raise as_http_exception(e)
    return TicketResponse.model_validate(ticket)


@router.get("/{ticket_id}", response_model=TicketResponse)
def get_ticket(ticket_id: str, stores: Stores = Depends(get_stores)):
    try:
        return TicketResponse.model_validate(TicketService(stores).get_ticket(ticket_id))
    except DomainError as e:
        raise as_http_exception(e)


@router.patch("/{ticket_id}", response_model=TicketResponse)
def update_ticket(ticket_id: str, data: TicketUpdate, stores: Stores = Depends(get_stores)):
    """修改工单"""
    try:
        ticket = TicketService(stores).update_ticket(ticket_id, data.title, data.description)
    except DomainError as e:
        raise as_http_exception(e)
    return TicketResponse.model_validate(ticket)


@router.post("/{ticket_id}/assign", response_model=TicketResponse)
def assign_ticket(ticket_id: str, data: TicketAssign, stores: Stores = Depends(get_stores)):
    """分配处理人"""
    try:
        ticket = TicketService(stores).assign_ticket(ticket_id, data.assignee)
    except DomainError as e:
        raise as_http_exception(e)
    return TicketResponse.model_validate(ticket)


@router.post("/{ticket_id}/complete", response_model=TicketResponse)
def complete_ticket(ticket_id: str, stores: Stores = Depends(get_stores)):
    """完成工单"""
    try:
        ticket = TicketService(stores).complete_ticket(ticket_id)
    except DomainError as e:
        raise as_http_exception(e)
    return TicketResponse.model_validate(ticket)


@router.post("/{ticket_id}/reset", response_model=TicketResponse)
def reset_ticket(ticket_id: str, stores: Stores = Depends(get_stores)):
    """退回待处理"""
    try:
        ticket = TicketService(stores).reset_ticket(ticket_id)
    except DomainError as e:
        raise as_http_exception(e)
    return TicketResponse.model_validate(ticket)
