"""Coupon aggregate: a shop-wide discount code applied to a cart."""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from cellar.domain import cellar
from cellar.errors import InsufficientCartValueError, InvalidError
from cellar.shared.clock import ensure_utc
from cellar.shared.money import round_money


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code):
    return (code or "").strip().upper()


def discount_for(discount_type, discount_value, subtotal):
    """Discount a coupon of this shape gives on ``subtotal``.

    Percentage coupons take ``rate/100`` of the subtotal; fixed coupons take
    their amount but never more than the subtotal.
    """
    if discount_type == DiscountType.PERCENTAGE.value:
        return subtotal * discount_value / 100
    return min(subtotal, discount_value)


@cellar.aggregate
class Coupon:
    code = String(required=True, min_length=4, max_length=20)
    discount_value = Float(required=True, min_value=0.0, max_value=1000.0)
    discount_type = String(choices=DiscountType, default=DiscountType.PERCENTAGE.value)
    minimum_purchase_amount = Float(default=0.0, min_value=0.0)
    expiry_date = DateTime(required=True)
    is_active = Boolean(default=True)
    created_by = String(max_length=100)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def code_must_be_uppercase(self):
        if self.code and self.code != self.code.upper():
            raise ValidationError({"code": ["Coupon code must be uppercase"]})

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.discount_value or 0) > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100%"]})

    @classmethod
    def create(
        cls,
        code,
        discount_value,
        expiry_date,
        discount_type=None,
        minimum_purchase_amount=None,
        created_by=None,
    ):
        now = datetime.now(UTC)
        expiry_date = ensure_utc(expiry_date)
        if expiry_date <= now:
            raise InvalidError("Expiry date must be in the future", {"expiry_date": expiry_date.isoformat()})

        return cls(
            code=normalize_code(code),
            discount_value=discount_value,
            discount_type=discount_type or DiscountType.PERCENTAGE.value,
            minimum_purchase_amount=minimum_purchase_amount or 0.0,
            expiry_date=expiry_date,
            is_active=True,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )

    def update(self, **changes):
        expiry_date = changes.get("expiry_date")
        if expiry_date is not None and ensure_utc(expiry_date) <= datetime.now(UTC):
            raise InvalidError("Expiry date must be in the future")

        for key, value in changes.items():
            if value is None:
                continue
            if key == "code":
                value = normalize_code(value)
            elif key == "expiry_date":
                value = ensure_utc(value)
            setattr(self, key, value)
        self.updated_at = datetime.now(UTC)

    def is_expired(self, now=None):
        now = ensure_utc(now) if now else datetime.now(UTC)
        return ensure_utc(self.expiry_date) <= now

    def ensure_usable(self, now=None):
        if not self.is_active:
            raise InvalidError("Coupon is not active", {"code": self.code})
        if self.is_expired(now):
            raise InvalidError("Coupon has expired", {"code": self.code})

    def ensure_applicable(self, subtotal, now=None):
        """Check the coupon can be applied to a cart with this live subtotal."""
        self.ensure_usable(now)
        if subtotal < (self.minimum_purchase_amount or 0.0):
            raise InsufficientCartValueError(
                f"Minimum purchase amount of {self.minimum_purchase_amount:.2f} required",
                {"minimum_purchase_amount": self.minimum_purchase_amount, "subtotal": round_money(subtotal)},
            )

    def discount_amount(self, order_amount):
        return round_money(discount_for(self.discount_type, self.discount_value, order_amount))
