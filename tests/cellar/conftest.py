"""Builders shared by the cellar test suites.

Each fixture returns a factory that goes through the real command handlers,
so records are created exactly as the API would create them.
"""

import json
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain


@pytest.fixture
def make_product():
    from cellar.catalogue.product.management import CreateProduct

    def _make(name="Chateau Margaux 2015", price=20.0, quantity=50, **details):
        command = CreateProduct(name=name, default_price=price, default_quantity=quantity, **details)
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture
def make_coupon():
    from cellar.coupon.management import CreateCoupon

    def _make(code="SAVE10", discount_value=10.0, discount_type="percentage", minimum_purchase_amount=0.0, **extra):
        command = CreateCoupon(
            code=code,
            discount_value=discount_value,
            discount_type=discount_type,
            minimum_purchase_amount=minimum_purchase_amount,
            expiry_date=extra.pop("expiry_date", datetime.now(UTC) + timedelta(days=30)),
            **extra,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture
def make_address():
    from cellar.shipment.management import CreateShipment

    def _make(user_id="user-001", **overrides):
        details = {
            "name": "Ada Lovelace",
            "address": "12 Vine Street",
            "city": "Napa",
            "state": "California",
            "country": "United States",
            "zip": "94558",
            "phone": "+1 707 555 0100",
            "email": "ada@example.com",
            "shipping_method": "standard",
        }
        details.update(overrides)
        return current_domain.process(CreateShipment(user_id=user_id, **details), asynchronous=False)

    return _make


@pytest.fixture
def make_flash_sale():
    from cellar.flash_sale.management import CreateFlashSale

    def _make(products, discount_percentage=25.0, starts_in=timedelta(hours=-1), lasts=timedelta(hours=4), **extra):
        start = datetime.now(UTC) + starts_in
        command = CreateFlashSale(
            title=extra.pop("title", "Weekend Bordeaux"),
            description=extra.pop("description", "Two days of Bordeaux at cellar prices"),
            start_date=start,
            end_date=start + lasts,
            discount_percentage=discount_percentage,
            products=json.dumps(products),
            is_active=extra.pop("is_active", True),
            **extra,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture
def make_promotion():
    from cellar.promotion.management import CreatePromotion

    def _make(title="Harvest Festival", discount_type="percentage", discount_value=10.0, **options):
        command = CreatePromotion(
            title=title,
            discount_type=discount_type,
            discount_value=discount_value,
            start_date=options.pop("start_date", datetime.now(UTC) - timedelta(days=1)),
            end_date=options.pop("end_date", datetime.now(UTC) + timedelta(days=30)),
            **options,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture
def add_to_cart():
    from cellar.cart.items import AddToCart

    def _add(product_id, quantity=1, user_id="user-001"):
        return current_domain.process(
            AddToCart(user_id=user_id, product_id=product_id, quantity=quantity),
            asynchronous=False,
        )

    return _add


@pytest.fixture
def load_cart():
    from cellar.cart.cart import Cart

    def _load(user_id="user-001"):
        return current_domain.repository_for(Cart).get(user_id)

    return _load
