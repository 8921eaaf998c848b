"""Coupon administration commands and read helpers."""

import structlog
from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from cellar.coupon.coupon import Coupon, DiscountType, normalize_code
from cellar.domain import cellar
from cellar.errors import ConflictError, NotFoundError
from cellar.shared.lookup import find_all, find_first, load

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=20)
    discount_value = Float(required=True, min_value=0.0)
    discount_type = String(choices=DiscountType)
    minimum_purchase_amount = Float(min_value=0.0)
    expiry_date = DateTime(required=True)
    created_by = String(max_length=100)


@cellar.command(part_of="Coupon")
class UpdateCoupon:
    coupon_id = Identifier(required=True)
    code = String(max_length=20)
    discount_value = Float(min_value=0.0)
    discount_type = String(choices=DiscountType)
    minimum_purchase_amount = Float(min_value=0.0)
    expiry_date = DateTime()
    is_active = Boolean()


@cellar.command(part_of="Coupon")
class DeleteCoupon:
    coupon_id = Identifier(required=True)


def find_coupon_by_code(code):
    coupon = find_first(Coupon, code=normalize_code(code))
    if coupon is None:
        raise NotFoundError("Coupon not found", {"code": normalize_code(code)})
    return coupon


@cellar.command_handler(part_of=Coupon)
class ManageCouponHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        code = normalize_code(command.code)
        if find_first(Coupon, code=code) is not None:
            raise ConflictError("Coupon code already exists", {"code": code})

        coupon = Coupon.create(
            code=code,
            discount_value=command.discount_value,
            discount_type=command.discount_type,
            minimum_purchase_amount=command.minimum_purchase_amount,
            expiry_date=command.expiry_date,
            created_by=command.created_by,
        )
        current_domain.repository_for(Coupon).add(coupon)
        logger.info("Coupon created", code=coupon.code)
        return str(coupon.id)

    @handle(UpdateCoupon)
    def update_coupon(self, command):
        coupon = load(Coupon, command.coupon_id)
        if command.code and normalize_code(command.code) != coupon.code:
            duplicate = find_first(Coupon, code=normalize_code(command.code))
            if duplicate is not None and str(duplicate.id) != str(coupon.id):
                raise ConflictError("Coupon code already exists", {"code": normalize_code(command.code)})

        coupon.update(
            code=command.code,
            discount_value=command.discount_value,
            discount_type=command.discount_type,
            minimum_purchase_amount=command.minimum_purchase_amount,
            expiry_date=command.expiry_date,
            is_active=command.is_active,
        )
        current_domain.repository_for(Coupon).add(coupon)
        logger.info("Coupon updated", code=coupon.code)

    @handle(DeleteCoupon)
    def delete_coupon(self, command):
        coupon = load(Coupon, command.coupon_id)
        current_domain.repository_for(Coupon)._dao.delete(coupon)
        logger.info("Coupon deleted", code=coupon.code)


def list_coupons(active=None, sort=None, page=1, limit=10, now=None):
    """Filter by expiry (``active`` True/False/None), sort and paginate."""
    coupons = find_all(Coupon)
    if active is not None:
        coupons = [c for c in coupons if c.is_expired(now) != active]

    if sort == "discount":
        coupons.sort(key=lambda c: c.discount_value, reverse=True)
    elif sort == "expiry":
        coupons.sort(key=lambda c: c.expiry_date)
    else:
        coupons.sort(key=lambda c: c.created_at, reverse=True)

    total = len(coupons)
    start = (page - 1) * limit
    items = coupons[start : start + limit]
    return {
        "coupons": items,
        "pagination": {
            "total_count": total,
            "total_pages": -(-total // limit) if limit else 0,
            "current_page": page,
            "has_more": start + len(items) < total,
        },
    }


def validate_coupon(code, order_amount, now=None):
    """Check a coupon against an order amount and report the discount it gives."""
    coupon = find_coupon_by_code(code)
    coupon.ensure_applicable(order_amount, now)
    discount = coupon.discount_amount(order_amount)
    return {
        "code": coupon.code,
        "discount_type": coupon.discount_type,
        "discount_value": coupon.discount_value,
        "discount_amount": discount,
        "final_amount": max(0.0, round(order_amount - discount, 2)),
    }
