"""
账单路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from roomops.core.errors import DomainError
from roomops.models.ontology import InvoiceStatus
from roomops.models.schemas import InvoiceCreate, InvoicePay, InvoiceResponse
from roomops.routers.errors import as_http_exception
from roomops.services.invoice_service import InvoiceService
from roomops.stores import Stores, get_stores

router = APIRouter(prefix="/invoices", tags=["账单管理"])


@router.get("", response_model=List[InvoiceResponse])
def list_invoices(
    status: Optional[InvoiceStatus] = None,
    query: Optional[str] = None,
    stores: Stores = Depends(get_stores)
):
    """获取账单列表"""
    invoices = InvoiceService(stores).list_invoices(status, query)
    return [InvoiceResponse.model_validate(i) for i in invoices]


@router.post("", response_model=InvoiceResponse)
def create_invoice(data: InvoiceCreate, stores: Stores = Depends(get_stores)):
    """按明细创建账单"""
    try:
        invoice = InvoiceService(stores).create_from_items(data.customer_name, data.items)
    except DomainError as e:
        raise as_http_exception(e)
    return InvoiceResponse.model_validate(invoice)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: str, stores: Stores = Depends(get_stores)):
    """获取账单详情"""
    try:
        return InvoiceResponse.model_validate(InvoiceService(stores).get_invoice(invoice_id))
    except DomainError as e:
        raise as_http_exception(e)


@router.post("/{invoice_id}/pay", response_model=InvoiceResponse)
def pay_invoice(invoice_id: str, data: InvoicePay, stores: Stores = Depends(get_stores)):
    """登记收款"""
    try:
        invoice = InvoiceService(stores).mark_paid(invoice_id, data.method, data.reference_code)
    except DomainError as e:
        raise as_http_exception(e)
    return InvoiceResponse.model_validate(invoice)


@router.post("/{invoice_id}/void", response_model=InvoiceResponse)
def void_invoice(invoice_id: str, stores: Stores = Depends(get_stores)):
    """作废账单"""
    try:
        invoice = InvoiceService(stores).void_invoice(invoice_id)
    except DomainError as e:
        raise as_http_exception(e)
    return InvoiceResponse.model_validate(invoice)
