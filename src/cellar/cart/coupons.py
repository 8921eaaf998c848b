"""Cart coupon management: apply and remove."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from cellar.cart.cart import AppliedCoupon, Cart
from cellar.cart.items import cart_prices, load_cart
from cellar.coupon.management import find_coupon_by_code
from cellar.domain import cellar

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Cart")
class ApplyCouponToCart:
    user_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=100)


@cellar.command(part_of="Cart")
class RemoveCouponFromCart:
    user_id = Identifier(required=True)


@cellar.command_handler(part_of=Cart)
class CartCouponHandler:
    @handle(ApplyCouponToCart)
    def apply_coupon(self, command):
        cart = load_cart(command.user_id)
        coupon = find_coupon_by_code(command.coupon_code)

        # Minimum purchase is checked against the live subtotal, not the stored snapshot
        prices = cart_prices(cart)
        coupon.ensure_applicable(cart.subtotal_for(prices))

        cart.apply_coupon(
            AppliedCoupon(
                coupon_id=str(coupon.id),
                code=coupon.code,
                discount_value=coupon.discount_value,
                discount_type=coupon.discount_type,
            ),
            prices,
        )
        current_domain.repository_for(Cart).add(cart)
        logger.info("Coupon applied to cart", cart_id=str(cart.id), code=coupon.code)

    @handle(RemoveCouponFromCart)
    def remove_coupon(self, command):
        cart = load_cart(command.user_id)
        cart.remove_coupon(cart_prices(cart))
        current_domain.repository_for(Cart).add(cart)
