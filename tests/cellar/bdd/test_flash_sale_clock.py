"""BDD tests for the flash sale clock and stock."""

from datetime import UTC, datetime

import pytest
from cellar.errors import InvalidError
from cellar.flash_sale.flash_sale import FlashSale
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/flash_sale_clock.feature")


def _utc(text):
    return datetime.fromisoformat(text).replace(tzinfo=UTC)


@pytest.fixture()
def clock():
    return {"now": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a flash sale from "{start}" to "{end}" at {discount:g} percent off'),
    target_fixture="sale",
)
def flash_sale(start, end, discount):
    return FlashSale.create(
        title="Weekend Bordeaux",
        description="Left bank classics",
        start_date=_utc(start),
        end_date=_utc(end),
        discount_percentage=discount,
        products=[{"product_id": "prod-001", "special_price": 15.0}],
        is_active=True,
    )


@given("the flash sale is switched off", target_fixture="sale")
def switched_off(sale):
    sale.is_active = False
    return sale


@given(parsers.cfparse("the flash sale has {stock:d} bottles of stock"), target_fixture="sale")
def with_stock(sale, stock):
    sale.total_stock = stock
    sale.stock_remaining = stock
    return sale


@given(parsers.cfparse("{qty:d} bottles were sold"), target_fixture="sale")
def sold(sale, qty):
    sale.record_purchase(qty)
    return sale


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the clock reads "{moment}"'))
def clock_reads(clock, moment):
    clock["now"] = _utc(moment)


@when(parsers.cfparse("{qty:d} bottles are sold"))
def sell(sale, qty, error):
    try:
        sale.record_purchase(qty)
    except InvalidError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the flash sale is "{status}"'))
def sale_status(sale, clock, status):
    assert sale.status(clock["now"]) == status


@then(parsers.cfparse('the countdown shows "{countdown}"'))
def countdown(sale, clock, countdown):
    assert sale.time_remaining(clock["now"]) == countdown


@then(parsers.cfparse("the sale starts in {minutes:d} minutes"))
def starts_in(sale, clock, minutes):
    assert sale.starts_in_ms(clock["now"]) == minutes * 60_000


@then(parsers.cfparse('the sale is rejected with "{code}"'))
def rejected(sale, error, code):
    assert error["exc"].code == code
    assert sale.stock_remaining == 3
