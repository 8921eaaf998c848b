"""Tests for the Promotion aggregate: lifecycle, pricing and targeting."""

from datetime import UTC, datetime, timedelta

import pytest
from cellar.catalogue.product.product import Product
from cellar.errors import ConflictError, InvalidError
from cellar.promotion.promotion import CODE_PATTERN, Promotion, PromotionStatus, generate_promo_code
from protean.exceptions import ValidationError


def _promotion(**overrides):
    now = datetime.now(UTC)
    defaults = {
        "title": "Harvest Festival",
        "discount_type": "percentage",
        "discount_value": 20.0,
        "start_date": now - timedelta(days=1),
        "end_date": now + timedelta(days=10),
        "code": "HARVEST20",
    }
    defaults.update(overrides)
    return Promotion.create(**defaults)


class TestPromotionCreation:
    def test_code_is_uppercased(self):
        assert _promotion(code="harvest20").code == "HARVEST20"

    def test_code_is_generated_when_missing(self):
        promotion = _promotion(code=None)
        assert CODE_PATTERN.match(promotion.code)

    def test_generated_codes_use_unambiguous_alphabet(self):
        code = generate_promo_code()
        assert len(code) == 8
        assert not set(code) & {"0", "O", "1", "I"}

    def test_defaults(self):
        promotion = _promotion()
        assert promotion.current_usage_count == 0
        assert promotion.usage_limit_per_user == 1
        assert promotion.priority == 1
        assert promotion.stackable is False
        assert promotion.is_visible is True

    def test_locations_are_normalised(self):
        promotion = _promotion(locations=[" Napa ", "", "BORDEAUX"])
        assert promotion.locations == ["napa", "bordeaux"]

    def test_percentage_over_hundred_rejected(self):
        with pytest.raises(ValidationError):
            _promotion(discount_value=120.0)

    def test_end_before_start_rejected(self):
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            _promotion(start_date=now, end_date=now - timedelta(days=1))

    def test_malformed_code_rejected(self):
        with pytest.raises(ValidationError):
            _promotion(code="NO-DASHES")


class TestPromotionStatus:
    def test_active(self):
        assert _promotion().status() == PromotionStatus.ACTIVE.value

    def test_scheduled(self):
        now = datetime.now(UTC)
        promotion = _promotion(start_date=now + timedelta(days=1), end_date=now + timedelta(days=2))
        assert promotion.status() == PromotionStatus.SCHEDULED.value

    def test_expired(self):
        assert _promotion().status(datetime.now(UTC) + timedelta(days=11)) == PromotionStatus.EXPIRED.value

    def test_inactive(self):
        assert _promotion(is_active=False).status() == PromotionStatus.INACTIVE.value

    def test_limit_reached(self):
        promotion = _promotion(total_usage_limit=1)
        promotion.record_usage()
        assert promotion.status() == PromotionStatus.LIMIT_REACHED.value


class TestUsage:
    def test_record_usage_counts(self):
        promotion = _promotion()
        promotion.record_usage()
        assert promotion.current_usage_count == 1

    def test_cannot_use_an_inactive_promotion(self):
        promotion = _promotion(is_active=False)
        with pytest.raises(InvalidError):
            promotion.record_usage()

    def test_code_frozen_once_used(self):
        promotion = _promotion()
        promotion.record_usage()
        with pytest.raises(ConflictError):
            promotion.update(code="NEWCODE1")

    def test_same_code_update_allowed_after_use(self):
        promotion = _promotion()
        promotion.record_usage()
        promotion.update(code="harvest20", title="Harvest Festival Extended")
        assert promotion.title == "Harvest Festival Extended"

    def test_used_promotion_cannot_be_deleted(self):
        promotion = _promotion()
        promotion.record_usage()
        with pytest.raises(ConflictError):
            promotion.ensure_deletable()


class TestDiscounts:
    def test_percentage_discount(self):
        assert _promotion().calculate_discount_amount(100.0) == 20.0

    def test_percentage_discount_capped(self):
        assert _promotion(maximum_discount=15.0).calculate_discount_amount(100.0) == 15.0

    def test_fixed_discount_never_exceeds_order(self):
        promotion = _promotion(discount_type="fixed", discount_value=30.0)
        assert promotion.calculate_discount_amount(25.0) == 25.0

    def test_below_minimum_purchase_gives_nothing(self):
        assert _promotion(minimum_purchase=50.0).calculate_discount_amount(49.99) == 0.0

    def test_free_shipping_does_not_discount_goods(self):
        promotion = _promotion(discount_type="freeShipping", discount_value=0.0)
        assert promotion.is_free_shipping is True
        assert promotion.calculate_discount_amount(80.0) == 0.0

    def test_discounted_unit_price(self):
        assert _promotion().calculate_discounted_price(25.0) == 20.0

    def test_discounted_price_never_negative(self):
        promotion = _promotion(discount_type="fixed", discount_value=40.0)
        assert promotion.calculate_discounted_price(25.0) == 0.0


class TestTargeting:
    def test_covers_listed_product(self):
        product = Product.create(name="Rioja Reserva", default_price=18.0)
        promotion = _promotion(applicable_product_ids=[str(product.id)])
        assert promotion.covers_product(product) is True

    def test_covers_product_in_listed_category(self):
        product = Product.create(name="Rioja Reserva", category_id="cat-red", default_price=18.0)
        promotion = _promotion(applicable_category_ids=["cat-red"])
        assert promotion.covers_product(product) is True

    def test_other_products_not_covered(self):
        product = Product.create(name="Sancerre", category_id="cat-white", default_price=22.0)
        promotion = _promotion(applicable_category_ids=["cat-red"])
        assert promotion.covers_product(product) is False
