"""FlashSale aggregate: a time-boxed special price on a set of products.

A sale is currently active when it is switched on, the clock is inside
[start_date, end_date] and, for stock-limited sales, units remain. Linked
products carry the sale's special price as a denormalised override; the
handlers in ``cellar.flash_sale.management`` keep that link consistent.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from cellar.domain import cellar
from cellar.errors import InvalidError
from cellar.shared.clock import ensure_utc, format_duration
from cellar.shared.money import round_money


class FlashSaleStatus(Enum):
    ACTIVE = "active"
    UPCOMING = "upcoming"
    ENDED = "ended"
    INACTIVE = "inactive"


@cellar.entity(part_of="FlashSale")
class FlashSaleProduct:
    product_id = Identifier(required=True)
    special_price = Float(required=True, min_value=0.0)


@cellar.aggregate
class FlashSale:
    title = String(required=True, max_length=200)
    description = Text(required=True)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    discount_percentage = Float(required=True, min_value=0.0, max_value=100.0)
    products = HasMany(FlashSaleProduct)
    is_active = Boolean(default=False)
    max_purchase_quantity = Integer(min_value=1)
    min_purchase_amount = Float(default=0.0, min_value=0.0)
    total_stock = Integer(min_value=0)
    stock_remaining = Integer(min_value=0)
    sold_count = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def end_date_must_follow_start_date(self):
        if self.start_date and self.end_date and ensure_utc(self.start_date) >= ensure_utc(self.end_date):
            raise ValidationError({"end_date": ["End date must be after start date"]})

    @invariant.post
    def stock_remaining_cannot_exceed_total(self):
        if self.total_stock is not None and self.stock_remaining is not None:
            if self.stock_remaining > self.total_stock:
                raise ValidationError({"stock_remaining": ["Remaining stock cannot exceed total stock"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        title,
        description,
        start_date,
        end_date,
        discount_percentage,
        products,
        is_active=False,
        max_purchase_quantity=None,
        min_purchase_amount=0.0,
        total_stock=None,
    ):
        """Create a sale.

        Args:
            products: list of dicts with ``product_id`` and ``special_price``
                (already resolved, see ``resolve_special_price``).
        """
        now = datetime.now(UTC)
        sale = cls(
            title=title,
            description=description,
            start_date=ensure_utc(start_date),
            end_date=ensure_utc(end_date),
            discount_percentage=discount_percentage,
            is_active=is_active,
            max_purchase_quantity=max_purchase_quantity,
            min_purchase_amount=min_purchase_amount or 0.0,
            total_stock=total_stock,
            stock_remaining=total_stock,
            sold_count=0,
            created_at=now,
            updated_at=now,
        )
        for entry in products:
            sale.add_products(
                FlashSaleProduct(product_id=entry["product_id"], special_price=round_money(entry["special_price"]))
            )
        return sale

    # -------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------
    def is_currently_active(self, now=None):
        now = ensure_utc(now) if now else datetime.now(UTC)
        return bool(
            self.is_active
            and ensure_utc(self.start_date) <= now <= ensure_utc(self.end_date)
            and (self.stock_remaining is None or self.stock_remaining > 0)
        )

    def has_ended(self, now=None):
        now = ensure_utc(now) if now else datetime.now(UTC)
        return now > ensure_utc(self.end_date)

    def time_remaining_ms(self, now=None):
        now = ensure_utc(now) if now else datetime.now(UTC)
        remaining = (ensure_utc(self.end_date) - now).total_seconds() * 1000
        return max(0, int(remaining))

    def time_remaining(self, now=None):
        return format_duration(self.time_remaining_ms(now))

    def starts_in_ms(self, now=None):
        now = ensure_utc(now) if now else datetime.now(UTC)
        return max(0, int((ensure_utc(self.start_date) - now).total_seconds() * 1000))

    def status(self, now=None):
        now = ensure_utc(now) if now else datetime.now(UTC)
        if now > ensure_utc(self.end_date):
            return FlashSaleStatus.ENDED.value
        if now < ensure_utc(self.start_date):
            return FlashSaleStatus.UPCOMING.value
        if not self.is_currently_active(now):
            return FlashSaleStatus.INACTIVE.value
        return FlashSaleStatus.ACTIVE.value

    # -------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------
    def product_ids(self):
        return {str(entry.product_id) for entry in self.products}

    def special_price_for(self, product_id):
        entry = next((p for p in self.products if str(p.product_id) == str(product_id)), None)
        return entry.special_price if entry else None

    def replace_products(self, products):
        """Swap the product list, returning the ids that were added and removed."""
        current = self.product_ids()
        incoming = {str(entry["product_id"]) for entry in products}

        with atomic_change(self):
            for entry in list(self.products):
                self.remove_products(entry)
            for entry in products:
                self.add_products(
                    FlashSaleProduct(
                        product_id=entry["product_id"],
                        special_price=round_money(entry["special_price"]),
                    )
                )
            self.updated_at = datetime.now(UTC)

        return incoming - current, current - incoming

    def update_details(self, **details):
        with atomic_change(self):
            for key, value in details.items():
                if value is None:
                    continue
                if key in ("start_date", "end_date"):
                    value = ensure_utc(value)
                setattr(self, key, value)
                if key == "total_stock":
                    sold = self.sold_count or 0
                    self.stock_remaining = max(0, value - sold)
            self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Sales
    # -------------------------------------------------------------------
    def record_purchase(self, quantity):
        if self.stock_remaining is not None:
            if self.stock_remaining < quantity:
                raise InvalidError(
                    "Flash sale stock exhausted",
                    {"flash_sale_id": str(self.id), "stock_remaining": self.stock_remaining},
                )
            self.stock_remaining -= quantity
        self.sold_count = (self.sold_count or 0) + quantity
        self.updated_at = datetime.now(UTC)


def resolve_special_price(special_price, default_price, discount_percentage):
    """Use the given special price, else discount the product's default price."""
    if special_price is not None:
        return round_money(special_price)
    return round_money((default_price or 0.0) * (1 - discount_percentage / 100))
