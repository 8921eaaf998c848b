"""Cart item management: commands and handler.

Carts are addressed by their owner's user id. Every handler loads the live
effective prices of the products in the cart so the pricing snapshot is
recomputed from current prices, not from what was cached on the items.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from cellar.cart.cart import Cart
from cellar.catalogue.product.product import Product
from cellar.domain import cellar
from cellar.errors import InvalidError, NotFoundError
from cellar.flash_sale.pricing import active_flash_sale, live_prices
from cellar.shared.lookup import load

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@cellar.command(part_of="Cart")
class UpdateCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@cellar.command(part_of="Cart")
class RemoveCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@cellar.command(part_of="Cart")
class IncrementCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@cellar.command(part_of="Cart")
class DecrementCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


def load_cart(user_id):
    try:
        return current_domain.repository_for(Cart).get(str(user_id))
    except ObjectNotFoundError as exc:
        raise NotFoundError("Cart not found", {"user_id": str(user_id)}) from exc


def cart_products(cart, *extra_product_ids):
    """Load the products in the cart (plus any extra ids), skipping ones that no longer exist."""
    repo = current_domain.repository_for(Product)
    products = {}
    for product_id in [*cart.product_ids(), *extra_product_ids]:
        if product_id in products:
            continue
        try:
            products[product_id] = repo.get(product_id)
        except ObjectNotFoundError:
            logger.warning("Cart references a missing product", cart_id=str(cart.id), product_id=product_id)
    return products


def cart_prices(cart, *extra_product_ids):
    return live_prices(cart_products(cart, *extra_product_ids).values())


def _check_quantity(product, quantity):
    """Stock and flash-sale purchase limits for a resulting line quantity."""
    product.ensure_available(quantity)

    sale = active_flash_sale(product)
    if sale is not None and sale.max_purchase_quantity and quantity > sale.max_purchase_quantity:
        raise InvalidError(
            f"Flash sale allows at most {sale.max_purchase_quantity} units per order",
            {"product_id": str(product.id), "max_purchase_quantity": sale.max_purchase_quantity},
        )


@cellar.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        product = load(Product, command.product_id)

        try:
            cart = repo.get(str(command.user_id))
        except ObjectNotFoundError:
            cart = Cart.create(user_id=command.user_id)
            logger.info("Cart created", user_id=str(command.user_id))

        _check_quantity(product, cart.quantity_of(product.id) + command.quantity)

        cart.add_item(
            product_id=str(product.id),
            quantity=command.quantity,
            prices=cart_prices(cart, str(product.id)),
        )
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        if command.quantity < 1:
            raise InvalidError("Quantity must be at least 1", {"quantity": command.quantity})

        cart = load_cart(command.user_id)
        cart.require_item(command.product_id)
        product = load(Product, command.product_id)
        _check_quantity(product, command.quantity)

        cart.update_item_quantity(command.product_id, command.quantity, cart_prices(cart))
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        cart = load_cart(command.user_id)
        cart.remove_item(command.product_id, cart_prices(cart))
        current_domain.repository_for(Cart).add(cart)

    @handle(IncrementCartItem)
    def increment_cart_item(self, command):
        cart = load_cart(command.user_id)
        cart.require_item(command.product_id)
        product = load(Product, command.product_id)
        _check_quantity(product, cart.quantity_of(command.product_id) + 1)

        cart.increment_item(command.product_id, cart_prices(cart))
        current_domain.repository_for(Cart).add(cart)

    @handle(DecrementCartItem)
    def decrement_cart_item(self, command):
        cart = load_cart(command.user_id)
        cart.decrement_item(command.product_id, cart_prices(cart))
        current_domain.repository_for(Cart).add(cart)
