"""Order status overwrite, used by back-office fulfillment."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from cellar.domain import cellar
from cellar.order.order import Order, OrderStatus
from cellar.shared.lookup import load

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)


@cellar.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        order = load(Order, command.order_id)
        previous = order.status
        order.update_status(command.status)
        current_domain.repository_for(Order).add(order)
        logger.info("Order status updated", order_id=str(order.id), previous_status=previous, status=order.status)
