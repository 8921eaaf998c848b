"""BDD tests for checkout through the order command handlers."""

import pytest
from cellar.cart.cart import Cart
from cellar.cart.coupons import ApplyCouponToCart
from cellar.catalogue.product.product import Product
from cellar.errors import CellarError
from cellar.order.creation import CreateOrder
from cellar.order.order import Order, OrderStatus
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/checkout.feature")


@pytest.fixture()
def wines():
    """Wine name to product id."""
    return {}


@pytest.fixture()
def checkout():
    return {"order": None}


def _cart_of(user_id):
    return current_domain.repository_for(Cart).get(user_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the cellar stocks "{name}" at {price:g} with {quantity:d} bottles'))
def stock_wine(make_product, wines, name, price, quantity):
    wines[name] = make_product(name=name, price=price, quantity=quantity)


@given(parsers.cfparse('"{user_id}" has a saved address in "{country}"'))
def saved_address(make_address, user_id, country):
    make_address(user_id=user_id, country=country)


@given(parsers.cfparse('"{user_id}" has {quantity:d} bottles of "{name}" in the cart'))
def fill_cart(add_to_cart, wines, user_id, quantity, name):
    add_to_cart(wines[name], quantity=quantity, user_id=user_id)


@given(parsers.cfparse('a coupon "{code}" worth {value:g} percent'))
def coupon(make_coupon, code, value):
    make_coupon(code=code, discount_value=value)


@given(parsers.cfparse('"{user_id}" applies the coupon "{code}"'))
def apply_coupon(user_id, code):
    current_domain.process(ApplyCouponToCart(user_id=user_id, coupon_code=code), asynchronous=False)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{user_id}" checks out'))
def checks_out(checkout, error, user_id):
    try:
        order_id = current_domain.process(CreateOrder(user_id=user_id), asynchronous=False)
    except CellarError as exc:
        error["exc"] = exc
    else:
        checkout["order"] = current_domain.repository_for(Order).get(order_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("a pending order totalling {total:g} is created"))
def order_created(checkout, error, total):
    assert error["exc"] is None
    assert checkout["order"].status == OrderStatus.PENDING.value
    assert checkout["order"].total_cost == total


@then(parsers.cfparse("the order ships for {cost:g}"))
def order_shipping(checkout, cost):
    assert checkout["order"].shipping_cost == cost


@then(parsers.cfparse("the order discount is {amount:g}"))
def order_discount(checkout, amount):
    assert checkout["order"].discount_amount == amount


@then(parsers.cfparse('"{name}" has {quantity:d} bottles left'))
def bottles_left(wines, name, quantity):
    assert current_domain.repository_for(Product).get(wines[name]).default_quantity == quantity


@then(parsers.cfparse('the cart of "{user_id}" is empty'))
def cart_empty(user_id):
    cart = _cart_of(user_id)
    assert len(cart.items) == 0
    assert cart.pricing.total == 0.0


@then(parsers.cfparse('the cart of "{user_id}" still holds {quantity:d} bottles'))
def cart_still_holds(user_id, quantity):
    assert sum(item.quantity for item in _cart_of(user_id).items) == quantity


@then(parsers.cfparse('the checkout is rejected with "{code}"'))
def checkout_rejected(error, code):
    assert error["exc"] is not None
    assert error["exc"].code == code
