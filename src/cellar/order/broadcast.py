"""Pushes order changes to connected real-time listeners.

Runs after the order has been persisted. Delivery is fire-and-forget: a
broadcaster failure is logged and never undoes the order change.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from cellar.broadcast import get_broadcaster
from cellar.domain import cellar
from cellar.order.events import OrderCreated, OrderStatusChanged
from cellar.order.order import Order

logger = structlog.get_logger(__name__)


def order_payload(order) -> dict:
    return {
        "id": str(order.id),
        "user_id": str(order.user_id),
        "status": order.status,
        "items": [
            {"product_id": str(i.product_id), "name": i.name, "quantity": i.quantity, "unit_price": i.unit_price}
            for i in order.items
        ],
        "sub_total": order.sub_total,
        "shipping_cost": order.shipping_cost,
        "total_cost": order.total_cost,
        "tracking_number": order.tracking_number,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }


def _emit(event_name, order_id):
    try:
        order = current_domain.repository_for(Order).get(str(order_id))
        get_broadcaster().emit(event_name, order_payload(order))
    except Exception as exc:
        logger.error("Order broadcast failed", event_name=event_name, order_id=str(order_id), error=str(exc))


@cellar.event_handler(part_of=Order)
class OrderBroadcastHandler:
    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        _emit("order-created", event.order_id)

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        _emit("order-updated", event.order_id)
