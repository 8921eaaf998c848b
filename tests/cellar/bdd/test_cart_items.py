"""BDD tests for cart item management."""

from cellar.errors import CellarError
from pytest_bdd import parsers, scenarios, when

scenarios("features/cart_items.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('{qty:d} of "{product_id}" are added to the cart'))
def add_to_cart(cart, prices, qty, product_id, error):
    try:
        cart.add_item(product_id, qty, prices)
    except CellarError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the quantity of "{product_id}" is set to {qty:d}'))
def set_quantity(cart, prices, product_id, qty, error):
    try:
        cart.update_item_quantity(product_id, qty, prices)
    except CellarError as exc:
        error["exc"] = exc


@when(parsers.cfparse('"{product_id}" is decremented'))
def decrement(cart, prices, product_id):
    cart.decrement_item(product_id, prices)


@when(parsers.cfparse('"{product_id}" is removed from the cart'))
def remove(cart, prices, product_id):
    cart.remove_item(product_id, prices)
