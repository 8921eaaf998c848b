"""Promotion and flash-sale performance reports."""

from collections import defaultdict
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from cellar.analytics.sales import product_sales
from cellar.analytics.timeframe import Period, growth_percentage, orders_in
from cellar.flash_sale.flash_sale import FlashSale
from cellar.promotion.promotion import Promotion
from cellar.shared.clock import ensure_utc
from cellar.shared.lookup import find_all, load
from cellar.shared.money import round_money


def roi(order_value, discount):
    """Return on the discount given away; None when nothing was discounted."""
    if not discount:
        return None
    return round((order_value - discount) / discount * 100, 2)


def promotion_performance(period: Period) -> dict:
    usage = defaultdict(list)
    for order in orders_in(period):
        if order.applied_promotion is not None:
            usage[str(order.applied_promotion.promotion_id)].append(order)

    repo = current_domain.repository_for(Promotion)
    rows = []
    for promotion_id, orders in usage.items():
        discount = sum(o.applied_promotion.discount_amount or 0.0 for o in orders)
        order_value = sum(o.total_cost for o in orders)
        daily = defaultdict(int)
        for order in orders:
            daily[ensure_utc(order.created_at).strftime("%Y-%m-%d")] += 1

        try:
            promotion = repo.get(promotion_id)
            details = {"code": promotion.code, "title": promotion.title, "discount_type": promotion.discount_type}
        except ObjectNotFoundError:
            details = {"code": orders[0].applied_promotion.code, "title": None, "discount_type": None}

        rows.append(
            {
                "promotion_id": promotion_id,
                **details,
                "usage_count": len(orders),
                "total_discount": round_money(discount),
                "total_order_value": round_money(order_value),
                "average_discount": round_money(discount / len(orders)),
                "average_order_value": round_money(order_value / len(orders)),
                "roi": roi(order_value, discount),
                "daily_usage": [{"date": day, "count": count} for day, count in sorted(daily.items())],
            }
        )

    rows.sort(key=lambda r: (-r["usage_count"], r["code"] or ""))
    return {
        "period": period.to_dict(),
        "promotions": rows,
        "total_usage": sum(r["usage_count"] for r in rows),
        "total_discount": round_money(sum(r["total_discount"] for r in rows)),
    }


def _flash_sale_report(sale, now) -> dict:
    end = min(ensure_utc(sale.end_date), now)
    start = ensure_utc(sale.start_date)
    window = Period(start=start, end=max(start, end), label="flash_sale")
    product_ids = sale.product_ids()

    during = product_sales(orders_in(window), product_ids)
    before = product_sales(orders_in(window.previous()), product_ids)

    products = []
    for entry in sale.products:
        product_id = str(entry.product_id)
        sold = during.get(product_id, {"name": None, "quantity": 0, "revenue": 0.0})
        prior = before.get(product_id, {"quantity": 0, "revenue": 0.0})
        products.append(
            {
                "product_id": product_id,
                "name": sold["name"],
                "special_price": entry.special_price,
                "quantity_sold": sold["quantity"],
                "revenue": sold["revenue"],
                "pre_sale_quantity": prior["quantity"],
                "pre_sale_revenue": prior["revenue"],
                "quantity_growth": growth_percentage(prior["quantity"], sold["quantity"]),
                "revenue_growth": growth_percentage(prior["revenue"], sold["revenue"]),
            }
        )

    depletion = None
    if sale.total_stock:
        depletion = round((sale.sold_count or 0) / sale.total_stock * 100, 2)

    units = sum(p["quantity_sold"] for p in products)
    return {
        "flash_sale_id": str(sale.id),
        "title": sale.title,
        "status": sale.status(now),
        "window": window.to_dict(),
        "products": products,
        "total_revenue": round_money(sum(p["revenue"] for p in products)),
        "total_units": units,
        "inventory_depletion": depletion,
        "sell_through": round(units / sale.total_stock * 100, 2) if sale.total_stock else None,
    }


def flash_sale_performance(flash_sale_id=None, now=None) -> list[dict]:
    now = ensure_utc(now) if now else datetime.now(UTC)
    sales = [load(FlashSale, flash_sale_id, "Flash sale")] if flash_sale_id else find_all(FlashSale)
    started = [s for s in sales if ensure_utc(s.start_date) <= now]
    return [_flash_sale_report(sale, now) for sale in started]
