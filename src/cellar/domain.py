"""Cellar domain: the online wine shop.

A single Protean domain holding the catalogue, carts, coupons, promotions,
flash sales, orders, shipment addresses, favorites, reviews, notifications
and the reporting queries that read over them.
"""

from protean.domain import Domain

from cellar.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

cellar = Domain(name="cellar")
