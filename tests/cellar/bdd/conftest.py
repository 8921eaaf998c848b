"""Shared BDD fixtures and step definitions for the cellar store."""

import pytest
from cellar.cart.cart import AppliedCoupon, Cart
from pytest_bdd import given, parsers, then, when

# Live unit prices the cart steps price against
PRICES = {"prod-001": 20.0, "prod-002": 12.5, "prod-003": 45.0}

_COUPON_TYPES = {"percent": "percentage", "fixed": "fixed"}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def prices():
    return dict(PRICES)


@pytest.fixture()
def error():
    """Container for the error a step was rejected with."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps: Cart
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart():
    cart = Cart.create(user_id="user-001")
    cart._events.clear()
    return cart


@given(parsers.cfparse('the cart holds {qty:d} of "{product_id}"'), target_fixture="cart")
def cart_holding(cart, prices, qty, product_id):
    cart.add_item(product_id, qty, prices)
    cart._events.clear()
    return cart


@given(parsers.cfparse('the coupon "{code}" worth {value:g} {kind} is applied'), target_fixture="cart")
@when(parsers.cfparse('the coupon "{code}" worth {value:g} {kind} is applied'))
def apply_coupon(cart, prices, code, value, kind):
    coupon = AppliedCoupon(coupon_id=f"coupon-{code.lower()}", code=code, discount_value=value, discount_type=_COUPON_TYPES[kind])
    cart.apply_coupon(coupon, prices)
    return cart


# ---------------------------------------------------------------------------
# Then steps: Cart
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_lines(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the cart subtotal is {amount:g}"))
def cart_subtotal(cart, amount):
    assert cart.pricing.subtotal == amount


@then(parsers.cfparse("the cart discount is {amount:g}"))
def cart_discount(cart, amount):
    assert cart.pricing.discount == amount


@then(parsers.cfparse("the cart total is {amount:g}"))
def cart_total(cart, amount):
    assert cart.pricing.total == amount


@then(parsers.cfparse('the cart action fails with "{code}"'))
def cart_action_fails(error, code):
    assert error["exc"] is not None
    assert error["exc"].code == code
