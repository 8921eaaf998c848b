"""Payment capture for a placed order."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from cellar.config import setting
from cellar.domain import cellar
from cellar.errors import InvalidError, PaymentError
from cellar.order.order import Order, OrderStatus, PaymentMethod
from cellar.payment.gateway import get_gateway
from cellar.shared.lookup import load
from cellar.shared.money import to_minor_units

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Order")
class CapturePayment:
    order_id = Identifier(required=True)
    user_id = Identifier()
    payment_method = String(required=True, choices=PaymentMethod)
    description = String(max_length=255)
    currency = String(max_length=3)


@cellar.command_handler(part_of=Order)
class CapturePaymentHandler:
    @handle(CapturePayment)
    def capture_payment(self, command):
        order = load(Order, command.order_id)
        if command.user_id:
            order.ensure_owned_by(command.user_id)
        if order.status != OrderStatus.PENDING.value:
            raise InvalidError(
                f"Cannot pay for an order with status: {order.status}",
                {"order_id": str(order.id), "status": order.status},
            )

        currency = (command.currency or setting("CURRENCY")).lower()
        result = get_gateway().create_payment_intent(
            amount_minor=to_minor_units(order.total_cost),
            currency=currency,
            description=command.description,
        )
        if not result.success:
            logger.warning("Payment intent declined", order_id=str(order.id), reason=result.failure_reason)
            raise PaymentError(result.failure_reason or "Payment failed", {"order_id": str(order.id)})

        order.record_payment(
            payment_method=command.payment_method,
            payment_reference=result.intent_id,
            description=command.description,
            currency=currency,
        )
        current_domain.repository_for(Order).add(order)

        logger.info("Order paid", order_id=str(order.id), tracking_number=order.tracking_number)
        return {
            "order_id": str(order.id),
            "client_secret": result.client_secret,
            "tracking_number": order.tracking_number,
            "status": order.status,
        }
