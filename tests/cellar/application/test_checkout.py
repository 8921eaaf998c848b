"""Order creation from the cart."""

import pytest
from cellar.cart.coupons import ApplyCouponToCart
from cellar.catalogue.product.product import Product
from cellar.errors import InsufficientCartValueError, InsufficientInventoryError, InvalidError
from cellar.flash_sale.flash_sale import FlashSale
from cellar.order.creation import CreateOrder
from cellar.order.order import Order, OrderStatus
from cellar.promotion.promotion import Promotion
from protean import current_domain


def _checkout(user_id="user-001", **options):
    order_id = current_domain.process(CreateOrder(user_id=user_id, **options), asynchronous=False)
    return current_domain.repository_for(Order).get(order_id)


def _get(cls, identifier):
    return current_domain.repository_for(cls).get(identifier)


class TestCreateOrder:
    def test_order_snapshots_the_cart(self, make_product, make_address, add_to_cart):
        product_id = make_product(name="Rioja Reserva", price=20.0)
        make_address()
        add_to_cart(product_id, quantity=2)

        order = _checkout(note="Leave with the neighbour")
        assert order.status == OrderStatus.PENDING.value
        assert order.items[0].name == "Rioja Reserva"
        assert order.items[0].unit_price == 20.0
        assert order.gross_total == 40.0
        assert order.sub_total == 40.0
        assert order.note == "Leave with the neighbour"
        assert order.shipping_address.city == "Napa"

    def test_shipping_is_quoted_on_parcel_weight(self, make_product, make_address, add_to_cart):
        make_address()
        add_to_cart(make_product(price=20.0), quantity=2)

        # two 0.75 kg bottles start a second kilogram
        order = _checkout()
        assert order.shipping_cost == 7.49
        assert order.total_cost == 47.49

    def test_single_bottle_pays_base_rate(self, make_product, make_address, add_to_cart):
        make_address()
        add_to_cart(make_product(price=20.0), quantity=1)
        assert _checkout().shipping_cost == 5.99

    def test_stock_is_reserved(self, make_product, make_address, add_to_cart):
        product_id = make_product(quantity=10)
        make_address()
        add_to_cart(product_id, quantity=3)

        _checkout()
        assert _get(Product, product_id).default_quantity == 7

    def test_cart_is_cleared(self, make_product, make_address, add_to_cart, load_cart):
        make_address()
        add_to_cart(make_product())
        _checkout()

        cart = load_cart()
        assert len(cart.items) == 0
        assert cart.pricing.total == 0.0

    def test_empty_cart_rejected(self, make_address):
        make_address()
        with pytest.raises(InvalidError):
            _checkout()

    def test_address_required(self, make_product, add_to_cart):
        add_to_cart(make_product())
        with pytest.raises(InvalidError):
            _checkout()

    def test_stock_shortfall_aborts_checkout(self, make_product, make_address, add_to_cart, load_cart):
        product_id = make_product(quantity=5)
        make_address()
        add_to_cart(product_id, quantity=5)

        product = _get(Product, product_id)
        product.reserve_stock(4)
        current_domain.repository_for(Product).add(product)

        with pytest.raises(InsufficientInventoryError):
            _checkout()
        assert len(load_cart().items) == 1
        assert _get(Product, product_id).default_quantity == 1


class TestCheckoutDiscounts:
    def test_cart_coupon_carries_into_the_order(self, make_product, make_coupon, make_address, add_to_cart):
        make_coupon(code="SAVE10", discount_value=10.0)
        make_address()
        add_to_cart(make_product(price=20.0), quantity=2)
        current_domain.process(ApplyCouponToCart(user_id="user-001", coupon_code="SAVE10"), asynchronous=False)

        order = _checkout()
        assert order.coupon_code == "SAVE10"
        assert order.discount_amount == 4.0
        assert order.sub_total == 36.0

    def test_promotion_is_redeemed(self, make_product, make_promotion, make_address, add_to_cart):
        promotion_id = make_promotion(code="HARVEST10", discount_value=10.0)
        make_address()
        add_to_cart(make_product(price=20.0), quantity=2)

        order = _checkout(promotion_code="harvest10")
        assert order.applied_promotion.code == "HARVEST10"
        assert order.discount_amount == 4.0
        assert order.sub_total == 36.0
        assert _get(Promotion, promotion_id).current_usage_count == 1

    def test_promotion_per_user_limit(self, make_product, make_promotion, make_address, add_to_cart):
        make_promotion(code="ONCEONLY")
        make_address()
        product_id = make_product()

        add_to_cart(product_id)
        _checkout(promotion_code="ONCEONLY")

        add_to_cart(product_id)
        with pytest.raises(InvalidError, match="maximum usage limit"):
            _checkout(promotion_code="ONCEONLY")

    def test_unknown_promotion_code(self, make_product, make_address, add_to_cart):
        make_address()
        add_to_cart(make_product())
        with pytest.raises(InvalidError):
            _checkout(promotion_code="NOSUCHCODE")

    def test_promotion_minimum_purchase(self, make_product, make_promotion, make_address, add_to_cart):
        make_promotion(code="BIGORDER", minimum_purchase=100.0)
        make_address()
        add_to_cart(make_product(price=20.0))
        with pytest.raises(InsufficientCartValueError):
            _checkout(promotion_code="BIGORDER")

    def test_free_shipping_promotion(self, make_product, make_promotion, make_address, add_to_cart):
        make_promotion(code="SHIPFREE", discount_type="freeShipping", discount_value=0.0)
        make_address()
        add_to_cart(make_product(price=20.0), quantity=2)

        order = _checkout(promotion_code="SHIPFREE")
        assert order.shipping_cost == 0.0
        assert order.total_cost == 40.0
        assert order.applied_promotion.free_shipping is True


class TestFlashSaleCheckout:
    def test_flash_price_and_stock_are_recorded(self, make_product, make_flash_sale, make_address, add_to_cart):
        product_id = make_product(price=20.0)
        sale_id = make_flash_sale([{"product_id": product_id, "special_price": 15.0}], total_stock=10)
        make_address()
        add_to_cart(product_id, quantity=2)

        order = _checkout()
        assert order.items[0].unit_price == 15.0
        assert str(order.items[0].flash_sale_id) == sale_id

        sale = _get(FlashSale, sale_id)
        assert sale.stock_remaining == 8
        assert sale.sold_count == 2

    def test_flash_sale_minimum_purchase(self, make_product, make_flash_sale, make_address, add_to_cart):
        product_id = make_product(price=20.0)
        make_flash_sale([{"product_id": product_id, "special_price": 15.0}], min_purchase_amount=50.0)
        make_address()
        add_to_cart(product_id, quantity=1)

        with pytest.raises(InsufficientCartValueError):
            _checkout()
