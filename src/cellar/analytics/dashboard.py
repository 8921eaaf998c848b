"""At-a-glance store metrics for the back office."""

from datetime import UTC, datetime

from cellar.analytics.sales import summarize
from cellar.analytics.timeframe import orders_in, resolve_period
from cellar.catalogue.product.product import Product
from cellar.config import setting
from cellar.order.order import OrderStatus
from cellar.shared.lookup import find_all
from cellar.shared.money import round_money


def _rate(part, whole):
    return round(part / whole * 100, 2) if whole else 0.0


def dashboard_metrics(timeframe=None, now=None) -> dict:
    now = now or datetime.now(UTC)
    today = resolve_period("today", now=now)
    period = resolve_period(timeframe, now=now)

    all_in_period = orders_in(period, include_cancelled=True)
    active = [o for o in all_in_period if o.status != OrderStatus.CANCELLED.value]
    delivered = [o for o in active if o.status == OrderStatus.DELIVERED.value]
    cancelled = len(all_in_period) - len(active)

    threshold = setting("LOW_STOCK_THRESHOLD")
    low_stock = sorted(
        (p for p in find_all(Product) if (p.default_quantity or 0) <= threshold),
        key=lambda p: (p.default_quantity or 0, p.name),
    )

    today_summary = summarize(orders_in(today))
    return {
        "period": period.to_dict(),
        "today": {"revenue": today_summary["total_revenue"], "orders": today_summary["total_orders"]},
        "totals": summarize(active),
        "fulfillment_rate": _rate(len(delivered), len(active)),
        "cancellation_rate": _rate(cancelled, len(all_in_period)),
        "pending_orders": sum(1 for o in active if o.status == OrderStatus.PENDING.value),
        "low_stock_products": [
            {"product_id": str(p.id), "name": p.name, "quantity": p.default_quantity or 0} for p in low_stock
        ],
        "average_discount": round_money(sum(o.discount_amount or 0.0 for o in active) / len(active)) if active else 0.0,
    }
