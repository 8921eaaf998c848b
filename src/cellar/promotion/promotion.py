"""Promotion aggregate: a scheduled, targeted discount redeemed at checkout.

Promotions are richer than coupons: they have a date window, usage limits
(per user and in total), optional targeting by product, category, location
and user, a priority and a stackable flag. Once a promotion has been used
its code is frozen and it can only be deactivated, never deleted.
"""

import random
import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, List, String, Text

from cellar.domain import cellar
from cellar.errors import ConflictError, InvalidError
from cellar.shared.clock import ensure_utc
from cellar.shared.money import round_money

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_PATTERN = re.compile(r"^[A-Z0-9]{4,20}$")


class PromotionDiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_SHIPPING = "freeShipping"


class PromotionStatus(Enum):
    INACTIVE = "inactive"
    SCHEDULED = "scheduled"
    EXPIRED = "expired"
    LIMIT_REACHED = "limit_reached"
    ACTIVE = "active"


def generate_promo_code(length=8):
    return "".join(random.choice(CODE_ALPHABET) for _ in range(length))


def _normalize_locations(locations):
    return [loc.strip().lower() for loc in locations or [] if loc and loc.strip()]


@cellar.aggregate
class Promotion:
    title = String(required=True, max_length=100)
    description = Text()
    code = String(required=True, max_length=20)
    discount_type = String(required=True, choices=PromotionDiscountType)
    discount_value = Float(required=True, min_value=0.0)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    minimum_purchase = Float(default=0.0, min_value=0.0)
    maximum_discount = Float(min_value=0.0)
    applicable_product_ids = List(content_type=String)
    applicable_category_ids = List(content_type=String)
    is_first_purchase_only = Boolean(default=False)
    usage_limit_per_user = Integer(default=1, min_value=1)
    total_usage_limit = Integer(min_value=1)
    current_usage_count = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    is_visible = Boolean(default=True)
    locations = List(content_type=String)
    included_user_ids = List(content_type=String)
    excluded_user_ids = List(content_type=String)
    priority = Integer(default=1, min_value=1, max_value=100)
    stackable = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def code_must_be_alphanumeric(self):
        if self.code and not CODE_PATTERN.match(self.code):
            raise ValidationError({"code": ["Promo code must be 4-20 alphanumeric characters"]})

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.discount_type == PromotionDiscountType.PERCENTAGE.value and (self.discount_value or 0) > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100%"]})

    @invariant.post
    def end_date_must_follow_start_date(self):
        if self.start_date and self.end_date and ensure_utc(self.end_date) <= ensure_utc(self.start_date):
            raise ValidationError({"end_date": ["End date must be after start date"]})

    @invariant.post
    def usage_cannot_exceed_total_limit(self):
        if self.total_usage_limit is not None and (self.current_usage_count or 0) > self.total_usage_limit:
            raise ValidationError({"current_usage_count": ["Usage count cannot exceed the total usage limit"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, title, discount_type, discount_value, end_date, start_date=None, code=None, **options):
        """Create a promotion, generating a code when none is given.

        ``options`` carries the optional targeting and limit fields
        (``minimum_purchase``, ``locations``, ``priority`` and so on).
        """
        now = datetime.now(UTC)
        options["locations"] = _normalize_locations(options.get("locations"))
        options = {key: value for key, value in options.items() if value is not None}

        return cls(
            title=title,
            code=(code or generate_promo_code()).strip().upper(),
            discount_type=discount_type,
            discount_value=discount_value,
            start_date=ensure_utc(start_date) if start_date else now,
            end_date=ensure_utc(end_date),
            current_usage_count=0,
            created_at=now,
            updated_at=now,
            **options,
        )

    def update(self, **changes):
        code = changes.pop("code", None)
        if code is not None:
            code = code.strip().upper()
            if code != self.code:
                if self.current_usage_count:
                    raise ConflictError(
                        "Promotion code cannot be modified once it has been used",
                        {"code": self.code},
                    )
                self.code = code

        if "locations" in changes and changes["locations"] is not None:
            changes["locations"] = _normalize_locations(changes["locations"])
        for key in ("start_date", "end_date"):
            if changes.get(key) is not None:
                changes[key] = ensure_utc(changes[key])

        for key, value in changes.items():
            if value is not None:
                setattr(self, key, value)
        self.updated_at = datetime.now(UTC)

    def ensure_deletable(self):
        if self.current_usage_count:
            raise ConflictError(
                "A promotion that has been used cannot be deleted; deactivate it instead",
                {"code": self.code, "current_usage_count": self.current_usage_count},
            )

    # -------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------
    def status(self, now=None):
        now = ensure_utc(now) if now else datetime.now(UTC)
        if not self.is_active:
            return PromotionStatus.INACTIVE.value
        if now < ensure_utc(self.start_date):
            return PromotionStatus.SCHEDULED.value
        if now > ensure_utc(self.end_date):
            return PromotionStatus.EXPIRED.value
        if self.limit_reached():
            return PromotionStatus.LIMIT_REACHED.value
        return PromotionStatus.ACTIVE.value

    def limit_reached(self):
        return self.total_usage_limit is not None and (self.current_usage_count or 0) >= self.total_usage_limit

    def within_window(self, now=None):
        now = ensure_utc(now) if now else datetime.now(UTC)
        return ensure_utc(self.start_date) <= now <= ensure_utc(self.end_date)

    @property
    def is_free_shipping(self):
        return self.discount_type == PromotionDiscountType.FREE_SHIPPING.value

    def record_usage(self, now=None):
        """Count one redemption against the promotion's limits."""
        status = self.status(now)
        if status != PromotionStatus.ACTIVE.value:
            raise InvalidError(f"Cannot apply promotion with status: {status}", {"code": self.code})

        self.current_usage_count = (self.current_usage_count or 0) + 1
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def calculate_discount_amount(self, order_value) -> float:
        """Discount this promotion gives on a whole order.

        Nothing below the minimum purchase. Percentage discounts are capped
        by ``maximum_discount``; no discount exceeds the order value.
        Free-shipping promotions discount the shipping, not the goods.
        """
        if not order_value or order_value < (self.minimum_purchase or 0.0):
            return 0.0

        discount = 0.0
        if self.discount_type == PromotionDiscountType.PERCENTAGE.value:
            discount = order_value * self.discount_value / 100
            if self.maximum_discount is not None:
                discount = min(discount, self.maximum_discount)
        elif self.discount_type == PromotionDiscountType.FIXED.value:
            discount = self.discount_value

        return round_money(min(discount, order_value))

    def calculate_discounted_price(self, original_price) -> float:
        """Unit price after this promotion, never below zero nor above the original."""
        price = original_price
        if self.discount_type == PromotionDiscountType.PERCENTAGE.value:
            discount = original_price * self.discount_value / 100
            if self.maximum_discount is not None:
                discount = min(discount, self.maximum_discount)
            price = original_price - discount
        elif self.discount_type == PromotionDiscountType.FIXED.value:
            price = original_price - self.discount_value

        return round_money(max(0.0, min(original_price, price)))

    def covers_product(self, product):
        """True when the promotion targets the product directly or through its category."""
        if str(product.id) in (self.applicable_product_ids or []):
            return True
        return bool(product.category_id) and str(product.category_id) in (self.applicable_category_ids or [])
