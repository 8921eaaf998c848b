"""Flash sale read helpers."""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from cellar.catalogue.product.product import Product
from cellar.flash_sale.flash_sale import FlashSale
from cellar.shared.clock import ensure_utc
from cellar.shared.lookup import find_all, load


def active_flash_sales(now=None) -> list:
    """Sales running right now, ending soonest first. Ended sales never appear."""
    now = ensure_utc(now) if now else datetime.now(UTC)
    sales = [s for s in find_all(FlashSale, is_active=True) if s.is_currently_active(now)]
    return sorted(sales, key=lambda s: ensure_utc(s.end_date))


def all_flash_sales() -> list:
    return sorted(find_all(FlashSale), key=lambda s: ensure_utc(s.start_date), reverse=True)


def get_flash_sale(flash_sale_id):
    return load(FlashSale, flash_sale_id, "Flash sale")


def flash_sale_products(flash_sale_id) -> list[dict]:
    """Products in a sale with their original and special prices."""
    sale = get_flash_sale(flash_sale_id)
    repo = current_domain.repository_for(Product)
    results = []
    for entry in sale.products:
        try:
            product = repo.get(str(entry.product_id))
        except ObjectNotFoundError:
            continue
        original = product.default_price or 0.0
        discount = round((1 - entry.special_price / original) * 100) if original else 0
        results.append(
            {
                "product": product,
                "original_price": original,
                "special_price": entry.special_price,
                "discount_percentage": discount,
            }
        )
    return results
