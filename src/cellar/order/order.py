"""Order aggregate: an immutable snapshot of a checked-out cart.

Items, prices and the shipping address are copied by value when the order
is placed and are never recomputed from live product data afterwards. Only
the status, payment details and tracking number change after creation.

    pending ──capture_payment──▶ paid ──update_status──▶ processing / shipped / ...

``update_status`` overwrites the status with any known value; there is no
transition guard.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from cellar.domain import cellar
from cellar.errors import InvalidError, NotFoundError
from cellar.order.events import OrderCreated, OrderStatusChanged
from cellar.shared.money import round_money


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    CASH_ON_DELIVERY = "cash_on_delivery"


def tracking_number_for(user_id, order_id, created_at) -> str:
    """Deterministic tracking number: user and order id tails plus the order date.

    Four user characters and two order characters leave room for the year
    of the ``YYYYMMDD`` stamp inside the ten-character limit; the month and
    day are cut off.
    """
    stamp = created_at.strftime("%Y%m%d")
    return f"{str(user_id)[-4:]}{str(order_id)[-2:]}{stamp}"[:10].upper()


@cellar.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    image_url = String(max_length=500)
    flash_sale_id = Identifier()

    @property
    def line_total(self):
        return round_money(self.unit_price * self.quantity)


@cellar.value_object(part_of="Order")
class ShippingAddress:
    name = String(required=True, max_length=150)
    address = String(required=True, max_length=255)
    apartment = String(max_length=100)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    country = String(required=True, max_length=100)
    zip = String(required=True, max_length=20)
    phone = String(max_length=30)
    email = String(max_length=254)


@cellar.value_object(part_of="Order")
class AppliedPromotion:
    promotion_id = Identifier(required=True)
    code = String(required=True, max_length=20)
    title = String(max_length=100)
    discount_type = String(required=True, max_length=20)
    discount_value = Float(default=0.0)
    discount_amount = Float(default=0.0)
    free_shipping = Boolean(default=False)


@cellar.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipment_id = Identifier(required=True)
    shipping_address = ValueObject(ShippingAddress)
    note = String(max_length=255)

    gross_total = Float(default=0.0, min_value=0.0)
    sub_total = Float(required=True, min_value=0.0)
    discount_amount = Float(default=0.0, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    total_cost = Float(required=True, min_value=0.0)

    applied_promotion = ValueObject(AppliedPromotion)
    coupon_code = String(max_length=20)

    payment_method = String(choices=PaymentMethod)
    payment_reference = String(max_length=100)
    payment_description = String(max_length=255)
    currency = String(max_length=3)
    tracking_number = String(max_length=10)

    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()

    @classmethod
    def create(cls, user_id, shipment, items, pricing, note=None, promotion=None, coupon_code=None):
        """Place an order.

        Args:
            shipment: the ``Shipment`` the order ships to; its address is copied.
            items: dicts with product_id, name, quantity, unit_price and
                optionally image_url and flash_sale_id.
            pricing: dict with gross_total, discount_amount, sub_total,
                shipping_cost and total_cost.
            promotion: an ``AppliedPromotion`` snapshot, if one was redeemed.
        """
        if not items:
            raise InvalidError("Cannot create an order without items")

        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            shipment_id=str(shipment.id),
            shipping_address=ShippingAddress(
                name=shipment.name,
                address=shipment.address,
                apartment=shipment.apartment,
                city=shipment.city,
                state=shipment.state,
                country=shipment.country,
                zip=shipment.zip,
                phone=shipment.phone,
                email=shipment.email,
            ),
            note=note,
            gross_total=round_money(pricing["gross_total"]),
            discount_amount=round_money(pricing["discount_amount"]),
            sub_total=round_money(pricing["sub_total"]),
            shipping_cost=round_money(pricing["shipping_cost"]),
            tax_amount=round_money(pricing.get("tax_amount", 0.0)),
            total_cost=round_money(pricing["total_cost"]),
            applied_promotion=promotion,
            coupon_code=coupon_code,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(OrderItem(**item))

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                user_id=str(user_id),
                item_count=sum(item["quantity"] for item in items),
                sub_total=order.sub_total,
                shipping_cost=order.shipping_cost,
                total_cost=order.total_cost,
                promotion_code=promotion.code if promotion else None,
                status=order.status,
                created_at=now,
            )
        )
        return order

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    def ensure_owned_by(self, user_id):
        if str(self.user_id) != str(user_id):
            # Someone else's order is reported as missing
            raise NotFoundError("Order not found", {"order_id": str(self.id)})

    def _change_status(self, status, now):
        previous = self.status
        self.status = status
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=previous,
                status=status,
                tracking_number=self.tracking_number,
                changed_at=now,
            )
        )

    def record_payment(self, payment_method, payment_reference, description=None, currency=None):
        if self.status != OrderStatus.PENDING.value:
            raise InvalidError(
                f"Cannot pay for an order with status: {self.status}",
                {"order_id": str(self.id), "status": self.status},
            )

        now = datetime.now(UTC)
        self.payment_method = payment_method
        self.payment_reference = payment_reference
        self.payment_description = description
        self.currency = currency
        self.paid_at = now
        self.tracking_number = tracking_number_for(self.user_id, self.id, self.created_at)
        self._change_status(OrderStatus.PAID.value, now)

    def update_status(self, status):
        self._change_status(status, datetime.now(UTC))
