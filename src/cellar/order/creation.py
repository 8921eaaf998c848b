"""Order creation: turn the user's cart into an order.

Everything happens in the handler's unit of work: stock is reserved on each
product, flash-sale and promotion counters are updated, the order is stored
and the cart is cleared. A stale product, sale or promotion version aborts
the whole checkout, so two racing checkouts cannot both take the last unit.
"""

from collections import defaultdict
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from cellar.cart.cart import Cart
from cellar.catalogue.product.product import Product
from cellar.coupon.coupon import Coupon, discount_for
from cellar.domain import cellar
from cellar.errors import InsufficientCartValueError, InvalidError
from cellar.flash_sale.flash_sale import FlashSale
from cellar.flash_sale.pricing import active_flash_sale, effective_unit_price
from cellar.order.order import AppliedPromotion, Order
from cellar.promotion.eligibility import customer_profile, ineligibility_reason
from cellar.promotion.promotion import Promotion
from cellar.shared.lookup import find_first, load
from cellar.shared.money import round_money
from cellar.shipment.management import default_address_of
from cellar.shipment.shipping import quote_shipping

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Order")
class CreateOrder:
    user_id = Identifier(required=True)
    note = String(max_length=255)
    promotion_code = String(max_length=20)


def _load_checkout_cart(user_id):
    try:
        cart = current_domain.repository_for(Cart).get(str(user_id))
    except ObjectNotFoundError as exc:
        raise InvalidError("Cart is empty") from exc
    if not cart.items:
        raise InvalidError("Cart is empty")
    return cart


def _redeem_promotion(code, user_id, order_value, now):
    """Check the promotion code for this user and count one use of it."""
    promotion = find_first(Promotion, code=code.strip().upper())
    if promotion is None:
        raise InvalidError("Invalid or expired promotion code", {"code": code})

    reason = ineligibility_reason(promotion, customer_profile(user_id), now)
    if reason is not None:
        raise InvalidError(reason, {"code": promotion.code})

    if order_value < (promotion.minimum_purchase or 0.0):
        raise InsufficientCartValueError(
            f"Minimum purchase amount of {promotion.minimum_purchase:.2f} required",
            {"code": promotion.code, "minimum_purchase": promotion.minimum_purchase},
        )

    discount = promotion.calculate_discount_amount(order_value)
    promotion.record_usage(now)
    current_domain.repository_for(Promotion).add(promotion)

    snapshot = AppliedPromotion(
        promotion_id=str(promotion.id),
        code=promotion.code,
        title=promotion.title,
        discount_type=promotion.discount_type,
        discount_value=promotion.discount_value,
        discount_amount=discount,
        free_shipping=promotion.is_free_shipping,
    )
    return snapshot, discount


@cellar.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        now = datetime.now(UTC)
        cart = _load_checkout_cart(command.user_id)

        shipment = default_address_of(command.user_id)
        if shipment is None:
            raise InvalidError("Shipment address is required")

        product_repo = current_domain.repository_for(Product)
        items = []
        weight = 0.0
        sales = {}
        sale_quantities = defaultdict(int)

        for line in cart.items:
            product = load(Product, line.product_id)
            unit_price = effective_unit_price(product, now)
            sale = active_flash_sale(product, now)

            product.reserve_stock(line.quantity)
            product_repo.add(product)

            if sale is not None:
                if sale.max_purchase_quantity and line.quantity > sale.max_purchase_quantity:
                    raise InvalidError(
                        f"Flash sale allows at most {sale.max_purchase_quantity} units per order",
                        {"product_id": str(product.id)},
                    )
                sales[str(sale.id)] = sale
                sale_quantities[str(sale.id)] += line.quantity

            items.append(
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "quantity": line.quantity,
                    "unit_price": round_money(unit_price),
                    "image_url": product.image_url,
                    "flash_sale_id": str(sale.id) if sale else None,
                }
            )
            weight += (product.weight_kg or 0.0) * line.quantity

        gross_total = sum(item["unit_price"] * item["quantity"] for item in items)

        sale_repo = current_domain.repository_for(FlashSale)
        for sale_id, sale in sales.items():
            if gross_total < (sale.min_purchase_amount or 0.0):
                raise InsufficientCartValueError(
                    f"Minimum purchase amount of {sale.min_purchase_amount:.2f} required for flash sale items",
                    {"flash_sale_id": sale_id, "min_purchase_amount": sale.min_purchase_amount},
                )
            sale.record_purchase(sale_quantities[sale_id])
            sale_repo.add(sale)

        coupon_discount = 0.0
        coupon_code = None
        if cart.coupon is not None:
            coupon = load(Coupon, cart.coupon.coupon_id)
            coupon.ensure_applicable(gross_total, now)
            coupon_discount = discount_for(coupon.discount_type, coupon.discount_value, gross_total)
            coupon_code = coupon.code

        promotion = None
        promotion_discount = 0.0
        if command.promotion_code:
            promotion, promotion_discount = _redeem_promotion(
                command.promotion_code,
                command.user_id,
                max(0.0, gross_total - coupon_discount),
                now,
            )

        discount_amount = round_money(coupon_discount) + promotion_discount
        sub_total = round_money(max(0.0, gross_total - discount_amount))

        shipping_cost = 0.0
        if not (promotion and promotion.free_shipping):
            shipping_cost = quote_shipping(shipment.shipping_method, max(weight, 1.0), shipment.country, now).shipping_cost

        order = Order.create(
            user_id=command.user_id,
            shipment=shipment,
            items=items,
            pricing={
                "gross_total": gross_total,
                "discount_amount": min(discount_amount, gross_total),
                "sub_total": sub_total,
                "shipping_cost": shipping_cost,
                "total_cost": sub_total + shipping_cost,
            },
            note=command.note,
            promotion=promotion,
            coupon_code=coupon_code,
        )
        current_domain.repository_for(Order).add(order)

        cart.clear()
        current_domain.repository_for(Cart).add(cart)

        logger.info(
            "Order created",
            order_id=str(order.id),
            user_id=str(command.user_id),
            total_cost=order.total_cost,
            item_count=order.item_count,
        )
        return str(order.id)
