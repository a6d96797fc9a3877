"""
账单服务 - 账单生成与收款
金额全部由明细派生（见 roomops.domain.billing.compute_total）
"""
from typing import Any, Iterable, List, Optional, Callable
from datetime import datetime
import logging

from roomops.core.errors import AlreadyPaid, InvalidMethod, InvalidTransition
from roomops.core.event_bus import event_bus, Event
from roomops.core.store import new_id
from roomops.domain.billing import Invoice, InvoiceItem, PAYMENT_METHODS, field_value
from roomops.domain.validation import (
    require_text, optional_text, require_positive_int, require_amount, parse_enum,
)
from roomops.models.events import EventType, InvoiceEventData
from roomops.models.ontology import InvoiceStatus, PaymentMethod
from roomops.stores import Stores

logger = logging.getLogger(__name__)


class InvoiceService:
    """账单服务"""

    def __init__(self, stores: Stores, event_publisher: Callable[[Event], None] = None):
        self.stores = stores
        self._publish_event = event_publisher or event_bus.publish

    def list_invoices(self, status: Optional[InvoiceStatus] = None,
                      query: Optional[str] = None) -> List[Invoice]:
        """获取账单列表，query 匹配客户名或账单号"""
        criteria = {}
        if status is not None:
            criteria["status"] = parse_enum(InvoiceStatus, status, "status")
        invoices = self.stores.invoices.list(**criteria)
        if query:
            keyword = query.strip().lower()
            invoices = [
                i for i in invoices
                if keyword in i.customer_name.lower() or keyword in i.id.lower()
            ]
        return sorted(invoices, key=lambda i: i.created_at, reverse=True)

    def get_invoice(self, invoice_id: str) -> Invoice:
        return self.stores.invoices.require(invoice_id)

    def build_invoice(self, customer_name: str, items: Iterable[Any],
                      service_order_id: Optional[str] = None) -> Invoice:
        """
        校验明细并构造账单（不写入）

        明细可以是字典或对象，需含 description / quantity / unit_price；
        行合计、小计、合计都重新计算，传入的合计字段一律忽略。
        空明细生成金额为 0 的账单。
        """
        customer_name = require_text(customer_name, "客户名称")
        invoice_items = [
            InvoiceItem(
                id=new_id("ii"),
                description=require_text(field_value(item, "description", None), "明细描述"),
                quantity=require_positive_int(field_value(item, "quantity", None), "数量"),
                unit_price=require_amount(field_value(item, "unit_price", None), "单价"),
            )
            for item in items
        ]
        return Invoice(
            id=new_id("inv"),
            customer_name=customer_name,
            items=invoice_items,
            service_order_id=service_order_id,
        )

    def create_from_items(self, customer_name: str, items: Iterable[Any],
                          service_order_id: Optional[str] = None) -> Invoice:
        """按明细生成账单"""
        invoice = self.build_invoice(customer_name, items, service_order_id)
        with self.stores.transaction():
            self.stores.invoices.insert(invoice)
        self.announce_created(invoice)
        return invoice

    def announce_created(self, invoice: Invoice) -> None:
        """账单写入后记录日志并发布 invoice.created"""
        logger.info(f"Invoice created: {invoice.id} customer={invoice.customer_name} total={invoice.total}")
        self._publish(EventType.INVOICE_CREATED, invoice)

    def mark_paid(self, invoice_id: str, method: str,
                  reference_code: Optional[str] = None) -> Invoice:
        """
        登记收款

        Raises:
            NotFound: 账单不存在
            AlreadyPaid: 已支付
            InvalidTransition: 已作废
            InvalidMethod: 支付方式不是 cash / transfer
        """
        invoice = self.get_invoice(invoice_id)
        if invoice.status == InvoiceStatus.PAID:
            raise AlreadyPaid(f"账单 {invoice.id} 已支付", entity="Invoice", entity_id=invoice.id)
        if invoice.status == InvoiceStatus.VOID:
            raise InvalidTransition(
                f"账单 {invoice.id} 已作废，不能收款",
                current=invoice.status.value, target=InvoiceStatus.PAID.value,
                entity="Invoice", entity_id=invoice.id,
            )
        method_value = method.value if isinstance(method, PaymentMethod) else method
        if method_value not in PAYMENT_METHODS:
            raise InvalidMethod(
                f"不支持的支付方式: {method!r}（可选: {', '.join(PAYMENT_METHODS)}）",
                entity="Invoice", entity_id=invoice.id,
            )

        invoice.status = InvoiceStatus.PAID
        invoice.payment_method = PaymentMethod(method_value)
        invoice.reference_code = optional_text(reference_code)
        invoice.paid_at = datetime.now()
        with self.stores.transaction():
            self.stores.invoices.update(invoice)

        logger.info(f"Invoice paid: {invoice.id} method={method_value} total={invoice.total}")
        self._publish(EventType.INVOICE_PAID, invoice)
        return invoice

    def void_invoice(self, invoice_id: str) -> Invoice:
        """作废未支付账单；已作废直接返回"""
        invoice = self.get_invoice(invoice_id)
        if invoice.status == InvoiceStatus.VOID:
            return invoice
        if invoice.status == InvoiceStatus.PAID:
            raise InvalidTransition(
                f"账单 {invoice.id} 已支付，不能作废",
                current=invoice.status.value, target=InvoiceStatus.VOID.value,
                entity="Invoice", entity_id=invoice.id,
            )

        invoice.status = InvoiceStatus.VOID
        with self.stores.transaction():
            self.stores.invoices.update(invoice)
        self._publish(EventType.INVOICE_VOIDED, invoice)
        return invoice

    def _publish(self, event_type: EventType, invoice: Invoice) -> None:
        self._publish_event(Event(
            event_type=event_type.value,
            timestamp=datetime.now(),
            data=InvoiceEventData(
                invoice_id=invoice.id,
                customer_name=invoice.customer_name,
                status=invoice.status.value,
                total=invoice.total,
                payment_method=invoice.payment_method.value if invoice.payment_method else None,
                reference_code=invoice.reference_code,
            ).to_dict(),
            source="invoice_service"
        ))
