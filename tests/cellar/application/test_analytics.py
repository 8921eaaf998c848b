"""Back-office reports over placed orders."""

import pytest
from cellar.analytics.campaigns import flash_sale_performance, promotion_performance, roi
from cellar.analytics.dashboard import dashboard_metrics
from cellar.analytics.sales import product_performance, sales_analytics
from cellar.analytics.timeframe import resolve_period
from cellar.order.creation import CreateOrder
from cellar.order.payment import CapturePayment
from cellar.order.status import UpdateOrderStatus
from protean import current_domain


def _process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture
def place_order(make_address, add_to_cart):
    make_address()

    def _place(product_id, quantity=1, **options):
        add_to_cart(product_id, quantity=quantity)
        return _process(CreateOrder(user_id="user-001", **options))

    return _place


def test_sales_summary(make_product, place_order):
    wine = make_product(name="Rioja", price=20.0)
    first = place_order(wine, quantity=1)
    place_order(wine, quantity=1)
    _process(CapturePayment(order_id=first, payment_method="paypal"))

    report = sales_analytics(resolve_period("month"))
    summary = report["summary"]
    assert summary["total_orders"] == 2
    assert summary["total_items_sold"] == 2
    assert summary["total_revenue"] == 51.98
    assert summary["average_order_value"] == 25.99
    assert report["cost_analysis"]["total_shipping"] == 11.98
    assert {row["key"] for row in report["payment_method_breakdown"]} == {"paypal", "unknown"}
    assert report["growth"]["revenue"] is None


def test_cancelled_orders_are_left_out(make_product, place_order):
    order_id = place_order(make_product(price=20.0))
    _process(UpdateOrderStatus(order_id=order_id, status="cancelled"))

    assert sales_analytics(resolve_period("week"))["summary"]["total_orders"] == 0


def test_product_performance_ranks_by_revenue(make_product, place_order):
    cheap = make_product(name="Vinho Verde", price=10.0)
    dear = make_product(name="Barolo", price=60.0)
    place_order(cheap, quantity=3)
    place_order(dear, quantity=1)

    report = product_performance(resolve_period("month"))
    assert [row["name"] for row in report["top_by_revenue"]] == ["Barolo", "Vinho Verde"]
    assert [row["name"] for row in report["top_by_quantity"]] == ["Vinho Verde", "Barolo"]


def test_promotion_performance(make_product, make_promotion, place_order):
    make_promotion(code="HARVEST10", discount_value=10.0)
    place_order(make_product(price=20.0), quantity=2, promotion_code="HARVEST10")

    report = promotion_performance(resolve_period("month"))
    [row] = report["promotions"]
    assert row["code"] == "HARVEST10"
    assert row["usage_count"] == 1
    assert row["total_discount"] == 4.0
    assert report["total_usage"] == 1


def test_roi_without_discount_is_none():
    assert roi(100.0, 0.0) is None
    assert roi(110.0, 10.0) == 1000.0


def test_flash_sale_performance(make_product, make_flash_sale, place_order):
    product_id = make_product(price=20.0)
    sale_id = make_flash_sale([{"product_id": product_id, "special_price": 15.0}], total_stock=10)
    place_order(product_id, quantity=2)

    [report] = flash_sale_performance(sale_id)
    assert report["total_units"] == 2
    assert report["total_revenue"] == 30.0
    assert report["inventory_depletion"] == 20.0
    assert report["status"] == "active"


def test_dashboard(make_product, place_order):
    make_product(name="Last bottles", quantity=2)
    order_id = place_order(make_product(name="Plenty", quantity=100, price=20.0))
    _process(UpdateOrderStatus(order_id=order_id, status="delivered"))

    metrics = dashboard_metrics("month")
    assert metrics["totals"]["total_orders"] == 1
    assert metrics["today"]["orders"] == 1
    assert metrics["fulfillment_rate"] == 100.0
    assert metrics["cancellation_rate"] == 0.0
    assert [p["name"] for p in metrics["low_stock_products"]] == ["Last bottles"]
