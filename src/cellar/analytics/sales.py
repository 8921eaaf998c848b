"""Sales and product performance reports over a reporting period."""

from collections import defaultdict

from cellar.analytics.timeframe import Period, growth_percentage, orders_in
from cellar.shared.clock import ensure_utc
from cellar.shared.money import round_money


def summarize(orders) -> dict:
    revenue = sum(o.total_cost for o in orders)
    return {
        "total_revenue": round_money(revenue),
        "total_orders": len(orders),
        "average_order_value": round_money(revenue / len(orders)) if orders else 0.0,
        "total_items_sold": sum(o.item_count for o in orders),
    }


def _revenue_by_day(orders) -> list[dict]:
    days = defaultdict(lambda: {"revenue": 0.0, "orders": 0, "item_count": 0})
    for order in orders:
        bucket = days[ensure_utc(order.created_at).strftime("%Y-%m-%d")]
        bucket["revenue"] += order.total_cost
        bucket["orders"] += 1
        bucket["item_count"] += order.item_count
    return [
        {"date": day, "revenue": round_money(v["revenue"]), "orders": v["orders"], "item_count": v["item_count"]}
        for day, v in sorted(days.items())
    ]


def _grouped(orders, key) -> list[dict]:
    groups = defaultdict(list)
    for order in orders:
        groups[key(order) or "unknown"].append(order)
    return [
        {
            "key": name,
            "count": len(members),
            "revenue": round_money(sum(o.total_cost for o in members)),
            "average_order_value": round_money(sum(o.total_cost for o in members) / len(members)),
        }
        for name, members in sorted(groups.items())
    ]


def sales_analytics(period: Period) -> dict:
    """Revenue, volume and cost breakdown for the period, compared with the one before."""
    orders = orders_in(period)
    summary = summarize(orders)
    previous = summarize(orders_in(period.previous()))

    return {
        "period": period.to_dict(),
        "summary": summary,
        "revenue_by_day": _revenue_by_day(orders),
        "payment_method_breakdown": _grouped(orders, lambda o: o.payment_method),
        "order_status_distribution": _grouped(orders, lambda o: o.status),
        "cost_analysis": {
            "total_tax": round_money(sum(o.tax_amount or 0.0 for o in orders)),
            "total_shipping": round_money(sum(o.shipping_cost or 0.0 for o in orders)),
            "total_discount": round_money(sum(o.discount_amount or 0.0 for o in orders)),
        },
        "growth": {
            "revenue": growth_percentage(previous["total_revenue"], summary["total_revenue"]),
            "orders": growth_percentage(previous["total_orders"], summary["total_orders"]),
        },
    }


def product_sales(orders, product_ids=None) -> dict[str, dict]:
    """Quantity and revenue per product across ``orders``."""
    totals = defaultdict(lambda: {"name": None, "quantity": 0, "revenue": 0.0, "orders": 0})
    for order in orders:
        for item in order.items:
            product_id = str(item.product_id)
            if product_ids is not None and product_id not in product_ids:
                continue
            entry = totals[product_id]
            entry["name"] = item.name
            entry["quantity"] += item.quantity
            entry["revenue"] += item.unit_price * item.quantity
            entry["orders"] += 1
    for entry in totals.values():
        entry["revenue"] = round_money(entry["revenue"])
    return dict(totals)


def product_performance(period: Period, limit=10) -> dict:
    totals = product_sales(orders_in(period))
    previous = product_sales(orders_in(period.previous()))

    rows = [
        {
            "product_id": product_id,
            **entry,
            "revenue_growth": growth_percentage(previous.get(product_id, {}).get("revenue", 0.0), entry["revenue"]),
        }
        for product_id, entry in totals.items()
    ]
    return {
        "period": period.to_dict(),
        "top_by_revenue": sorted(rows, key=lambda r: (-r["revenue"], r["product_id"]))[:limit],
        "top_by_quantity": sorted(rows, key=lambda r: (-r["quantity"], r["product_id"]))[:limit],
    }
