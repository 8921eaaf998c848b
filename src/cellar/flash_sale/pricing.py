"""Effective unit prices: flash-sale overrides layered over default prices."""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from cellar.errors import InvalidError
from cellar.flash_sale.flash_sale import FlashSale


def active_flash_sale(product, now=None):
    """Return the flash sale currently overriding the product's price, if any."""
    if not product.current_flash_sale_id or product.flash_sale_price is None:
        return None
    try:
        sale = current_domain.repository_for(FlashSale).get(str(product.current_flash_sale_id))
    except ObjectNotFoundError:
        return None
    return sale if sale.is_currently_active(now or datetime.now(UTC)) else None


def effective_unit_price(product, now=None) -> float:
    if active_flash_sale(product, now) is not None:
        return product.flash_sale_price
    if product.default_price is None:
        raise InvalidError(f"Product {product.name} has no price", {"product_id": str(product.id)})
    return product.default_price


def live_prices(products, now=None) -> dict[str, float]:
    """Map product id to its effective unit price right now."""
    now = now or datetime.now(UTC)
    return {str(product.id): effective_unit_price(product, now) for product in products}
