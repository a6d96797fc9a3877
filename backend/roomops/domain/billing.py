"""
服务单/账单记录与金额计算

所有合计都由明细派生：compute_total 是唯一的计算入口，
记录上的 total_amount / subtotal / total 都是只读属性。
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional

from roomops.core.state_machine import build_state_machine
from roomops.models.ontology import InvoiceStatus, PaymentMethod, ServiceOrderStatus


# 当前业务不计税
TAX = Decimal("0")

PAYMENT_METHODS = tuple(m.value for m in PaymentMethod)


_MISSING = object()


def field_value(item: Any, name: str, default: Any = _MISSING) -> Any:
    """从字典或对象上取字段"""
    if isinstance(item, Mapping):
        value = item.get(name, default)
    else:
        value = getattr(item, name, default)
    if value is _MISSING:
        raise KeyError(name)
    return value


def compute_total(items: Iterable[Any]) -> Decimal:
    """
    合计 = Σ quantity × unit_price

    空列表合计为 0；单价为 0 的免费项目照常参与求和。
    明细可以是记录对象，也可以是含 quantity / unit_price 的字典。
    """
    total = Decimal("0")
    for item in items:
        total += Decimal(field_value(item, "quantity")) * Decimal(str(field_value(item, "unit_price")))
    return total


# ============== 服务单 ==============

SERVICE_ORDER_STATE_MACHINE = build_state_machine(
    "ServiceOrder",
    states=list(ServiceOrderStatus),
    edges=[
        (ServiceOrderStatus.PENDING, ServiceOrderStatus.IN_PROGRESS, "start"),
        (ServiceOrderStatus.PENDING, ServiceOrderStatus.COMPLETED, "complete"),
        (ServiceOrderStatus.PENDING, ServiceOrderStatus.CANCELLED, "cancel"),
        (ServiceOrderStatus.IN_PROGRESS, ServiceOrderStatus.COMPLETED, "complete"),
        (ServiceOrderStatus.IN_PROGRESS, ServiceOrderStatus.CANCELLED, "cancel"),
    ],
    initial_state=ServiceOrderStatus.PENDING,
    final_states=[ServiceOrderStatus.COMPLETED, ServiceOrderStatus.CANCELLED],
)


@dataclass
class LineItem:
    """服务单明细"""
    id: str
    service_name: str
    quantity: int
    unit_price: Decimal

    @property
    def total(self) -> Decimal:
        return compute_total([self])


@dataclass
class ServiceOrder:
    """服务单"""
    id: str
    code: str
    customer_name: str
    room_code: Optional[str] = None
    status: ServiceOrderStatus = ServiceOrderStatus.PENDING
    note: Optional[str] = None
    invoice_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    items: List[LineItem] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return compute_total(self.items)

    @property
    def is_editable(self) -> bool:
        return not SERVICE_ORDER_STATE_MACHINE.is_final(self.status)


# ============== 账单 ==============

INVOICE_STATE_MACHINE = build_state_machine(
    "Invoice",
    states=list(InvoiceStatus),
    edges=[
        (InvoiceStatus.UNPAID, InvoiceStatus.PAID, "pay"),
        (InvoiceStatus.UNPAID, InvoiceStatus.VOID, "void"),
    ],
    initial_state=InvoiceStatus.UNPAID,
    final_states=[InvoiceStatus.PAID, InvoiceStatus.VOID],
)


@dataclass
class InvoiceItem:
    """账单明细，行合计恒等于 quantity × unit_price"""
    id: str
    description: str
    quantity: int
    unit_price: Decimal

    @property
    def total(self) -> Decimal:
        return compute_total([self])


@dataclass
class Invoice:
    """账单"""
    id: str
    customer_name: str
    status: InvoiceStatus = InvoiceStatus.UNPAID
    created_at: datetime = field(default_factory=datetime.now)
    items: List[InvoiceItem] = field(default_factory=list)
    payment_method: Optional[PaymentMethod] = None
    reference_code: Optional[str] = None
    paid_at: Optional[datetime] = None
    service_order_id: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return compute_total(self.items)

    @property
    def tax(self) -> Decimal:
        return TAX

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.tax
