"""
服务单路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from roomops.core.errors import DomainError
from roomops.models.ontology import ServiceOrderStatus
from roomops.models.schemas import (
    ServiceOrderCreate, ServiceOrderResponse, ServiceOrderStatusUpdate,
    LineItemCreate, InvoiceResponse
)
from roomops.routers.errors import as_http_exception
from roomops.services.service_order_service import ServiceOrderService
from roomops.stores import Stores, get_stores

router = APIRouter(prefix="/service-orders", tags=["服务单"])


@router.get("", response_model=List[ServiceOrderResponse])
def list_service_orders(
    query: Optional[str] = None,
    status: Optional[ServiceOrderStatus] = None,
    sort: str = "created_at",
    descending: bool = True,
    stores: Stores = Depends(get_stores)
):
    """获取服务单列表"""
    try:
        orders = ServiceOrderService(stores).list_orders(query, status, sort, descending)
    except DomainError as e:
        raise as_http_exception(e)
    return [ServiceOrderResponse.model_validate(o) for o in orders]


@router.post("", response_model=ServiceOrderResponse)
def create_service_order(data: ServiceOrderCreate, stores: Stores = Depends(get_stores)):
    """创建服务单"""
    try:
        order = ServiceOrderService(stores).create_order(
            data.customer_name, data.room_code, data.note, data.items
        )
    except DomainError as e:
        raise as_http_exception(e)
    return ServiceOrderResponse.model_validate(order)


@router.get("/{order_id}", response_model=ServiceOrderResponse)
def get_service_order(order_id: str, stores: Stores = Depends(get_stores)):
    """获取服务单详情"""
    try:
        return ServiceOrderResponse.model_validate(ServiceOrderService(stores).get_order(order_id))
    except DomainError as e:
        raise as_http_exception(e)


@router.delete("/{order_id}")
def delete_service_order(order_id: str, stores: Stores = Depends(get_stores)):
    """删除服务单"""
    try:
        ServiceOrderService(stores).delete_order(order_id)
    except DomainError as e:
        raise as_http_exception(e)
    return {"message": "服务单已删除"}


@router.post("/{order_id}/items", response_model=ServiceOrderResponse)
def add_line_item(order_id: str, data: LineItemCreate, stores: Stores = Depends(get_stores)):
    """添加明细"""
    try:
        order = ServiceOrderService(stores).add_line_item(
            order_id, data.service_name, data.quantity, data.unit_price, service_id=data.service_id
        )
    except DomainError as e:
        raise as_http_exception(e)
    return ServiceOrderResponse.model_validate(order)


@router.delete("/{order_id}/items/{item_id}", response_model=ServiceOrderResponse)
def remove_line_item(order_id: str, item_id: str, stores: Stores = Depends(get_stores)):
    """删除明细"""
    try:
        order = ServiceOrderService(stores).remove_line_item(order_id, item_id)
    except DomainError as e:
        raise as_http_exception(e)
    return ServiceOrderResponse.model_validate(order)


@router.post("/{order_id}/status", response_model=ServiceOrderResponse)
def update_service_order_status(
    order_id: str,
    data: ServiceOrderStatusUpdate,
    stores: Stores = Depends(get_stores)
):
    """变更服务单状态"""
    try:
        order = ServiceOrderService(stores).transition(order_id, data.status)
    except DomainError as e:
        raise as_http_exception(e)
    return ServiceOrderResponse.model_validate(order)


@router.post("/{order_id}/invoice", response_model=InvoiceResponse)
def create_invoice_for_order(order_id: str, stores: Stores = Depends(get_stores)):
    """按服务单开票"""
    try:
        invoice = ServiceOrderService(stores).create_invoice(order_id)
    except DomainError as e:
        raise as_http_exception(e)
    return InvoiceResponse.model_validate(invoice)
