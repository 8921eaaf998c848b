"""Coupon administration and validation."""

from datetime import UTC, datetime, timedelta

import pytest
from cellar.coupon.management import DeleteCoupon, UpdateCoupon, list_coupons, validate_coupon
from cellar.errors import ConflictError, InsufficientCartValueError, NotFoundError
from protean import current_domain


def _process(command):
    return current_domain.process(command, asynchronous=False)


def test_codes_are_unique_regardless_of_case(make_coupon):
    make_coupon(code="WELCOME")
    with pytest.raises(ConflictError):
        make_coupon(code="welcome")


def test_validate_reports_the_discount(make_coupon):
    make_coupon(code="SAVE15", discount_value=15.0)
    result = validate_coupon("save15", 80.0)
    assert result["code"] == "SAVE15"
    assert result["discount_amount"] == 12.0
    assert result["final_amount"] == 68.0


def test_validate_enforces_minimum(make_coupon):
    make_coupon(code="BIGSPEND", minimum_purchase_amount=100.0)
    with pytest.raises(InsufficientCartValueError):
        validate_coupon("BIGSPEND", 60.0)


def test_validate_unknown_code():
    with pytest.raises(NotFoundError):
        validate_coupon("MISSING", 10.0)


def test_listing_sorts_and_paginates(make_coupon):
    make_coupon(code="FIVE", discount_value=5.0)
    make_coupon(code="TWENTY", discount_value=20.0)
    make_coupon(code="TENNER", discount_value=10.0)

    page = list_coupons(sort="discount", page=1, limit=2)
    assert [c.code for c in page["coupons"]] == ["TWENTY", "TENNER"]
    assert page["pagination"] == {"total_count": 3, "total_pages": 2, "current_page": 1, "has_more": True}


def test_listing_by_expiry_state(make_coupon):
    make_coupon(code="SOON", expiry_date=datetime.now(UTC) + timedelta(days=1))
    later = datetime.now(UTC) + timedelta(days=2)

    assert [c.code for c in list_coupons(active=False, now=later)["coupons"]] == ["SOON"]
    assert list_coupons(active=True, now=later)["coupons"] == []


def test_update_and_delete(make_coupon):
    coupon_id = make_coupon(code="AUTUMN")
    _process(UpdateCoupon(coupon_id=coupon_id, discount_value=12.0))
    assert validate_coupon("AUTUMN", 100.0)["discount_amount"] == 12.0

    _process(DeleteCoupon(coupon_id=coupon_id))
    with pytest.raises(NotFoundError):
        validate_coupon("AUTUMN", 100.0)
