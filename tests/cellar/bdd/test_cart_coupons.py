"""BDD tests for cart coupon management."""

from cellar.errors import InvalidError
from pytest_bdd import parsers, scenarios, when

scenarios("features/cart_coupons.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('{qty:d} of "{product_id}" are added to the cart'))
def add_to_cart(cart, prices, qty, product_id):
    cart.add_item(product_id, qty, prices)


@when("the coupon is removed")
def remove_coupon(cart, prices, error):
    try:
        cart.remove_coupon(prices)
    except InvalidError as exc:
        error["exc"] = exc
