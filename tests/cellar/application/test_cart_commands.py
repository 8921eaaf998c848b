"""Cart command handlers against live product prices."""

from datetime import timedelta

import pytest
from cellar.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from cellar.cart.items import DecrementCartItem, IncrementCartItem, RemoveCartItem, UpdateCartItem
from cellar.cart.management import ClearCart, RecalculateCart
from cellar.errors import InsufficientCartValueError, InsufficientInventoryError, InvalidError, NotFoundError
from protean import current_domain


def _process(command):
    return current_domain.process(command, asynchronous=False)


class TestAddToCart:
    def test_first_add_creates_the_cart(self, make_product, add_to_cart, load_cart):
        product_id = make_product(price=20.0)
        add_to_cart(product_id, quantity=2)

        cart = load_cart()
        assert cart.items[0].quantity == 2
        assert cart.pricing.subtotal == 40.0
        assert cart.pricing.total == 40.0

    def test_repeat_add_sums_quantities(self, make_product, add_to_cart, load_cart):
        product_id = make_product(price=20.0)
        add_to_cart(product_id, quantity=2)
        add_to_cart(product_id, quantity=1)
        assert load_cart().items[0].quantity == 3

    def test_flash_sale_price_applies(self, make_product, make_flash_sale, add_to_cart, load_cart):
        product_id = make_product(price=20.0)
        make_flash_sale([{"product_id": product_id, "special_price": 15.0}])

        add_to_cart(product_id, quantity=2)
        cart = load_cart()
        assert cart.items[0].unit_price == 15.0
        assert cart.pricing.subtotal == 30.0

    def test_upcoming_flash_sale_does_not_apply(self, make_product, make_flash_sale, add_to_cart, load_cart):
        product_id = make_product(price=20.0)
        make_flash_sale([{"product_id": product_id, "special_price": 15.0}], starts_in=timedelta(hours=2))

        add_to_cart(product_id, quantity=1)
        assert load_cart().pricing.subtotal == 20.0

    def test_ended_flash_sale_does_not_apply(self, make_product, make_flash_sale, add_to_cart, load_cart):
        product_id = make_product(price=20.0)
        make_flash_sale(
            [{"product_id": product_id, "special_price": 15.0}],
            starts_in=timedelta(hours=-5),
            lasts=timedelta(hours=4),
        )

        add_to_cart(product_id, quantity=2)
        cart = load_cart()
        assert cart.items[0].unit_price == 20.0
        assert cart.pricing.subtotal == 40.0

    def test_stock_is_checked(self, make_product, add_to_cart):
        product_id = make_product(quantity=2)
        with pytest.raises(InsufficientInventoryError):
            add_to_cart(product_id, quantity=3)

    def test_stock_check_counts_what_is_already_in_the_cart(self, make_product, add_to_cart):
        product_id = make_product(quantity=3)
        add_to_cart(product_id, quantity=2)
        with pytest.raises(InsufficientInventoryError):
            add_to_cart(product_id, quantity=2)

    def test_flash_sale_purchase_limit(self, make_product, make_flash_sale, add_to_cart):
        product_id = make_product(price=20.0)
        make_flash_sale([{"product_id": product_id}], max_purchase_quantity=2)
        with pytest.raises(InvalidError):
            add_to_cart(product_id, quantity=3)

    def test_unknown_product(self, add_to_cart):
        with pytest.raises(NotFoundError):
            add_to_cart("prod-missing")


class TestLineChanges:
    def test_update_quantity(self, make_product, add_to_cart, load_cart):
        product_id = make_product(price=20.0)
        add_to_cart(product_id, quantity=2)
        _process(UpdateCartItem(user_id="user-001", product_id=product_id, quantity=5))
        assert load_cart().pricing.subtotal == 100.0

    def test_update_below_one_rejected(self, make_product, add_to_cart):
        product_id = make_product()
        add_to_cart(product_id)
        with pytest.raises(InvalidError):
            _process(UpdateCartItem(user_id="user-001", product_id=product_id, quantity=0))

    def test_update_without_a_cart(self, make_product):
        product_id = make_product()
        with pytest.raises(NotFoundError):
            _process(UpdateCartItem(user_id="user-001", product_id=product_id, quantity=2))

    def test_increment_and_decrement(self, make_product, add_to_cart, load_cart):
        product_id = make_product(price=20.0)
        add_to_cart(product_id, quantity=1)

        _process(IncrementCartItem(user_id="user-001", product_id=product_id))
        assert load_cart().items[0].quantity == 2

        _process(DecrementCartItem(user_id="user-001", product_id=product_id))
        _process(DecrementCartItem(user_id="user-001", product_id=product_id))
        cart = load_cart()
        assert len(cart.items) == 0
        assert cart.pricing.total == 0.0

    def test_remove_item(self, make_product, add_to_cart, load_cart):
        keep = make_product(name="Barolo", price=30.0)
        drop = make_product(name="Chianti", price=12.0)
        add_to_cart(keep)
        add_to_cart(drop)

        _process(RemoveCartItem(user_id="user-001", product_id=drop))
        cart = load_cart()
        assert cart.product_ids() == [keep]
        assert cart.pricing.subtotal == 30.0

    def test_clear(self, make_product, add_to_cart, load_cart):
        add_to_cart(make_product())
        _process(ClearCart(user_id="user-001"))
        assert len(load_cart().items) == 0


class TestCartCoupons:
    def test_apply_percentage_coupon(self, make_product, make_coupon, add_to_cart, load_cart):
        product_id = make_product(price=20.0)
        make_coupon(code="SAVE10", discount_value=10.0)
        add_to_cart(product_id, quantity=2)

        _process(ApplyCouponToCart(user_id="user-001", coupon_code="save10"))
        cart = load_cart()
        assert cart.coupon.code == "SAVE10"
        assert cart.pricing.discount == 4.0
        assert cart.pricing.total == 36.0

    def test_minimum_purchase_leaves_cart_untouched(self, make_product, make_coupon, add_to_cart, load_cart):
        product_id = make_product(price=20.0)
        make_coupon(code="BIGSPEND", minimum_purchase_amount=50.0)
        add_to_cart(product_id, quantity=1)

        with pytest.raises(InsufficientCartValueError):
            _process(ApplyCouponToCart(user_id="user-001", coupon_code="BIGSPEND"))

        cart = load_cart()
        assert cart.coupon is None
        assert cart.pricing.total == 20.0

    def test_unknown_coupon(self, make_product, add_to_cart):
        add_to_cart(make_product())
        with pytest.raises(NotFoundError):
            _process(ApplyCouponToCart(user_id="user-001", coupon_code="NOPE"))

    def test_remove_coupon(self, make_product, make_coupon, add_to_cart, load_cart):
        make_coupon(code="SAVE10")
        add_to_cart(make_product(price=20.0), quantity=2)
        _process(ApplyCouponToCart(user_id="user-001", coupon_code="SAVE10"))

        _process(RemoveCouponFromCart(user_id="user-001"))
        cart = load_cart()
        assert cart.coupon is None
        assert cart.pricing.total == 40.0


class TestRecalculate:
    def test_picks_up_a_flash_sale_started_after_adding(self, make_product, make_flash_sale, add_to_cart):
        product_id = make_product(price=20.0)
        add_to_cart(product_id, quantity=2)
        make_flash_sale([{"product_id": product_id, "special_price": 15.0}])

        pricing = _process(RecalculateCart(user_id="user-001"))
        assert pricing["subtotal"] == 30.0
        assert pricing["total"] == 30.0
