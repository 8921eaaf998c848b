"""Whole-cart commands: clear and recalculate."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from cellar.cart.cart import Cart
from cellar.cart.items import cart_prices, load_cart
from cellar.domain import cellar


@cellar.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@cellar.command(part_of="Cart")
class RecalculateCart:
    """Refresh the pricing snapshot from live product prices."""

    user_id = Identifier(required=True)


@cellar.command_handler(part_of=Cart)
class CartLifecycleHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_cart(command.user_id)
        cart.clear()
        current_domain.repository_for(Cart).add(cart)

    @handle(RecalculateCart)
    def recalculate(self, command):
        cart = load_cart(command.user_id)
        cart.reprice(cart_prices(cart))
        current_domain.repository_for(Cart).add(cart)
        return cart.pricing.to_dict()
