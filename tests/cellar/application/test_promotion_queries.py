"""Promotion administration, listings and cart offers."""

import pytest
from cellar.errors import ConflictError, ForbiddenError, InvalidError
from cellar.promotion.management import DeletePromotion, UpdatePromotion
from cellar.promotion.queries import (
    best_promotions_for_cart,
    check_bulk_eligibility,
    list_promotions,
    products_for_promotion,
)
from protean import current_domain


def _process(command):
    return current_domain.process(command, asynchronous=False)


class TestAdministration:
    def test_codes_are_unique(self, make_promotion):
        make_promotion(code="HARVEST")
        with pytest.raises(ConflictError):
            make_promotion(code="harvest")

    def test_update_keeps_unsupplied_fields(self, make_promotion):
        promotion_id = make_promotion(code="HARVEST", priority=20, locations=["Napa"])
        _process(UpdatePromotion(promotion_id=promotion_id, title="Harvest 2026"))

        [promotion] = list_promotions()[0]
        assert promotion.title == "Harvest 2026"
        assert promotion.priority == 20
        assert promotion.locations == ["napa"]

    def test_unused_promotion_can_be_deleted(self, make_promotion):
        promotion_id = make_promotion(code="HARVEST")
        _process(DeletePromotion(promotion_id=promotion_id))
        assert list_promotions() == ([], 0)


class TestListing:
    def test_hidden_promotions_are_admin_only(self, make_promotion):
        make_promotion(code="PUBLIC1")
        make_promotion(code="SECRET1", is_visible=False)

        visible, total = list_promotions()
        assert [p.code for p in visible] == ["PUBLIC1"]
        assert list_promotions(include_hidden=True)[1] == 2

    def test_ordered_by_priority(self, make_promotion):
        make_promotion(code="LOWPRIO", priority=1)
        make_promotion(code="TOPPRIO", priority=90)
        assert [p.code for p in list_promotions()[0]] == ["TOPPRIO", "LOWPRIO"]


class TestEligibilityChecks:
    def test_bulk_eligibility(self, make_promotion):
        open_id = make_promotion(code="OPENALL")
        vip_id = make_promotion(code="VIPONLY", included_user_ids=["user-vip"])

        results = {r["code"]: r for r in check_bulk_eligibility("user-001", [open_id, vip_id, "missing"])}
        assert results["OPENALL"]["is_eligible"] is True
        assert results["VIPONLY"]["is_eligible"] is False
        assert results["VIPONLY"]["reason"] == "You don't qualify for this promotion"
        assert len(results) == 2

    def test_bulk_eligibility_needs_a_list(self):
        with pytest.raises(InvalidError):
            check_bulk_eligibility("user-001", "not-a-list")


class TestPromotedProducts:
    def test_lists_covered_products_with_prices(self, make_product, make_promotion):
        covered = make_product(name="Rioja", price=20.0)
        make_product(name="Sancerre", price=25.0)
        make_promotion(code="RIOJA20", discount_value=20.0, applicable_product_ids=[covered])

        [entry] = products_for_promotion("rioja20")
        assert entry["product"].name == "Rioja"
        assert entry["discounted_price"] == 16.0
        assert entry["is_eligible"] is False

    def test_hidden_promotion_needs_a_signed_in_user(self, make_promotion):
        make_promotion(code="HIDDEN1", is_visible=False)
        with pytest.raises(ForbiddenError):
            products_for_promotion("HIDDEN1")

    def test_hidden_promotion_for_a_qualifying_user(self, make_product, make_promotion):
        product_id = make_product(name="Rioja", price=20.0)
        make_promotion(code="HIDDEN1", is_visible=False, applicable_product_ids=[product_id])
        [entry] = products_for_promotion("HIDDEN1", user_id="user-001")
        assert entry["is_eligible"] is True


class TestBestForCart:
    def test_no_cart(self):
        assert best_promotions_for_cart("user-001") == {"subtotal": 0.0, "promotions": [], "total_discount": 0.0}

    def test_best_exclusive_plus_stackable(self, make_product, make_promotion, add_to_cart):
        add_to_cart(make_product(price=50.0), quantity=2)
        make_promotion(code="SMALLOFF", discount_value=5.0, priority=1)
        make_promotion(code="BIGOFF", discount_value=10.0, priority=10)
        make_promotion(code="STACKER", discount_type="fixed", discount_value=3.0, stackable=True)

        result = best_promotions_for_cart("user-001")
        assert result["subtotal"] == 100.0
        assert [o["promotion"].code for o in result["promotions"]] == ["BIGOFF", "STACKER"]
        assert result["total_discount"] == 13.0

    def test_minimum_purchase_filters_offers(self, make_product, make_promotion, add_to_cart):
        add_to_cart(make_product(price=20.0))
        make_promotion(code="BIGSPEND", minimum_purchase=100.0)
        assert best_promotions_for_cart("user-001")["promotions"] == []
