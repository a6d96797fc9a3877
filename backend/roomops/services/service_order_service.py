"""
服务单服务 - 服务单明细与状态
服务单完成后发布事件，历史记录处理器据此写入客户活动
"""
from typing import Any, Iterable, List, Optional, Callable
from datetime import datetime
import logging

from roomops.core.errors import InvalidState, ValidationError, not_found
from roomops.core.event_bus import event_bus, Event
from roomops.core.locks import order_locks
from roomops.core.store import new_id
from roomops.domain.billing import (
    Invoice, LineItem, ServiceOrder, SERVICE_ORDER_STATE_MACHINE, field_value,
)
from roomops.domain.validation import (
    require_text, optional_text, require_positive_int, require_amount, parse_enum,
)
from roomops.models.events import EventType, ServiceOrderStatusData
from roomops.models.ontology import ServiceOrderStatus
from roomops.services.invoice_service import InvoiceService
from roomops.stores import Stores

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "created_at": lambda o: o.created_at,
    "code": lambda o: o.code,
    "customer_name": lambda o: o.customer_name.lower(),
    "total_amount": lambda o: o.total_amount,
    "status": lambda o: o.status.value,
}


class ServiceOrderService:
    """服务单服务"""

    def __init__(self, stores: Stores, event_publisher: Callable[[Event], None] = None):
        self.stores = stores
        self._publish_event = event_publisher or event_bus.publish
        self.invoice_service = InvoiceService(stores, self._publish_event)

    def _generate_order_code(self) -> str:
        """生成服务单号：SO + 日期 + 序号"""
        prefix = f"SO{datetime.now().strftime('%Y%m%d')}"
        codes = {o.code for o in self.stores.service_orders.list() if o.code.startswith(prefix)}
        seq = len(codes) + 1
        while f"{prefix}{str(seq).zfill(3)}" in codes:
            seq += 1
        return f"{prefix}{str(seq).zfill(3)}"

    # ============== 查询 ==============

    def list_orders(self, query: Optional[str] = None,
                    status: Optional[ServiceOrderStatus] = None,
                    sort: str = "created_at", descending: bool = True) -> List[ServiceOrder]:
        """获取服务单列表，query 匹配单号、客户名、房间号"""
        if sort not in SORT_FIELDS:
            raise ValidationError(f"不支持的排序字段: {sort}")
        criteria = {}
        if status is not None:
            criteria["status"] = parse_enum(ServiceOrderStatus, status, "status")
        orders = self.stores.service_orders.list(**criteria)
        if query:
            keyword = query.strip().lower()
            orders = [
                o for o in orders
                if keyword in o.code.lower()
                or keyword in o.customer_name.lower()
                or keyword in (o.room_code or "").lower()
            ]
        return sorted(orders, key=SORT_FIELDS[sort], reverse=descending)

    def get_order(self, order_id: str) -> ServiceOrder:
        return self.stores.service_orders.require(order_id)

    # ============== 变更 ==============

    def create_order(self, customer_name: str, room_code: Optional[str] = None,
                     note: Optional[str] = None, items: Iterable[Any] = ()) -> ServiceOrder:
        """创建服务单（待处理），可同时带入明细"""
        order = ServiceOrder(
            id=new_id("so"),
            code=self._generate_order_code(),
            customer_name=require_text(customer_name, "客户名称"),
            room_code=optional_text(room_code),
            note=optional_text(note),
        )
        for item in items:
            order.items.append(self._build_line_item(
                service_name=field_value(item, "service_name", None),
                quantity=field_value(item, "quantity", None),
                unit_price=field_value(item, "unit_price", None),
                service_id=field_value(item, "service_id", None),
            ))

        with self.stores.transaction():
            self.stores.service_orders.insert(order)
        logger.info(f"Service order created: {order.code} total={order.total_amount}")
        return order

    def add_line_item(self, order_id: str, service_name: Optional[str] = None,
                      quantity: int = 1, unit_price: Any = None,
                      service_id: Optional[str] = None) -> ServiceOrder:
        """
        添加明细

        指定 service_id 时从服务目录带出名称和单价（显式传入的值优先）。
        """
        order = self._editable_order(order_id)
        order.items.append(self._build_line_item(service_name, quantity, unit_price, service_id))
        with self.stores.transaction():
            self.stores.service_orders.update(order)
        return order

    def remove_line_item(self, order_id: str, item_id: str) -> ServiceOrder:
        """删除明细"""
        order = self._editable_order(order_id)
        remaining = [item for item in order.items if item.id != item_id]
        if len(remaining) == len(order.items):
            raise not_found("LineItem", item_id)
        order.items = remaining
        with self.stores.transaction():
            self.stores.service_orders.update(order)
        return order

    def transition(self, order_id: str, status: ServiceOrderStatus) -> ServiceOrder:
        """变更服务单状态"""
        target = parse_enum(ServiceOrderStatus, status, "status")
        order = self.get_order(order_id)
        old_status = order.status
        SERVICE_ORDER_STATE_MACHINE.validate(old_status, target)

        order.status = target
        with self.stores.transaction():
            self.stores.service_orders.update(order)

        logger.info(f"Service order {order.code}: {old_status.value} -> {target.value}")
        self._publish(EventType.SERVICE_ORDER_STATUS_CHANGED, order, old_status)
        if target == ServiceOrderStatus.COMPLETED:
            self._publish(EventType.SERVICE_ORDER_COMPLETED, order, old_status)
        return order

    def delete_order(self, order_id: str) -> bool:
        """删除服务单"""
        order = self.get_order(order_id)
        with self.stores.transaction():
            self.stores.service_orders.delete(order.id)
        logger.info(f"Service order deleted: {order.code}")
        return True

    def create_invoice(self, order_id: str) -> Invoice:
        """
        按已完成服务单的明细开具账单

        在服务单锁内重新读取服务单，账单写入与服务单关联在同一事务内提交，
        每个服务单只能开票一次。
        """
        with order_locks.hold(order_id):
            order = self.get_order(order_id)
            if order.status != ServiceOrderStatus.COMPLETED:
                raise InvalidState(
                    f"服务单 {order.code} 尚未完成，不能开票",
                    current=order.status.value, entity="ServiceOrder", entity_id=order.id,
                )
            if order.invoice_id:
                raise InvalidState(
                    f"服务单 {order.code} 已开票 {order.invoice_id}",
                    current=order.status.value, entity="ServiceOrder", entity_id=order.id,
                )

            invoice = self.invoice_service.build_invoice(
                order.customer_name,
                [
                    {"description": item.service_name, "quantity": item.quantity, "unit_price": item.unit_price}
                    for item in order.items
                ],
                service_order_id=order.id,
            )
            order.invoice_id = invoice.id
            with self.stores.transaction():
                self.stores.invoices.insert(invoice)
                self.stores.service_orders.update(order)

        self.invoice_service.announce_created(invoice)
        return invoice

    # ============== 内部 ==============

    def _editable_order(self, order_id: str) -> ServiceOrder:
        order = self.get_order(order_id)
        if not order.is_editable:
            raise InvalidState(
                f"服务单 {order.code} 已{'完成' if order.status == ServiceOrderStatus.COMPLETED else '取消'}，不能修改明细",
                current=order.status.value, entity="ServiceOrder", entity_id=order.id,
            )
        return order

    def _build_line_item(self, service_name: Optional[str], quantity: Any,
                         unit_price: Any, service_id: Optional[str] = None) -> LineItem:
        if service_id:
            service = self.stores.service_items.require(service_id)
            service_name = service_name or service.name
            if unit_price is None:
                unit_price = service.price
        return LineItem(
            id=new_id("li"),
            service_name=require_text(service_name, "服务名称"),
            quantity=require_positive_int(quantity, "数量"),
            unit_price=require_amount(unit_price, "单价"),
        )

    def _publish(self, event_type: EventType, order: ServiceOrder,
                 old_status: ServiceOrderStatus) -> None:
        self._publish_event(Event(
            event_type=event_type.value,
            timestamp=datetime.now(),
            data=ServiceOrderStatusData(
                order_id=order.id,
                order_code=order.code,
                customer_name=order.customer_name,
                room_code=order.room_code,
                old_status=old_status.value,
                new_status=order.status.value,
                total_amount=order.total_amount,
                item_count=len(order.items),
            ).to_dict(),
            source="service_order_service"
        ))
