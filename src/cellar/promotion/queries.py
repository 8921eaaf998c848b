"""Read-side helpers for promotions: listings, eligibility and cart offers."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from cellar.cart.cart import Cart
from cellar.cart.items import cart_products
from cellar.catalogue.product.product import Product
from cellar.config import setting
from cellar.errors import ForbiddenError, InvalidError, NotFoundError
from cellar.flash_sale.pricing import live_prices
from cellar.promotion.eligibility import customer_profile, ineligibility_reason, select_promotions
from cellar.promotion.promotion import Promotion, PromotionStatus
from cellar.shared.lookup import find_all, find_first, load
from cellar.shared.money import round_money

logger = structlog.get_logger(__name__)


def find_promotion_by_code(code):
    promotion = find_first(Promotion, code=(code or "").strip().upper())
    if promotion is None:
        raise NotFoundError("Promotion not found or expired", {"code": code})
    return promotion


def get_promotion(promotion_id):
    return load(Promotion, promotion_id)


def list_promotions(include_hidden=False, status=None, discount_type=None, page=1, limit=10, now=None):
    promotions = find_all(Promotion)
    if not include_hidden:
        promotions = [p for p in promotions if p.is_visible]
    if status:
        promotions = [p for p in promotions if p.status(now) == status]
    if discount_type:
        promotions = [p for p in promotions if p.discount_type == discount_type]

    promotions.sort(key=lambda p: (-p.priority, p.code))
    start = (page - 1) * limit
    return promotions[start : start + limit], len(promotions)


def check_bulk_eligibility(user_id, promotion_ids, now=None) -> list[dict]:
    if not isinstance(promotion_ids, list):
        raise InvalidError("Invalid promotion IDs")

    customer = customer_profile(user_id)
    repo = current_domain.repository_for(Promotion)
    results = []
    for promotion_id in promotion_ids:
        try:
            promotion = repo.get(str(promotion_id))
        except ObjectNotFoundError:
            continue
        if not promotion.is_active:
            continue
        reason = ineligibility_reason(promotion, customer, now)
        results.append(
            {"id": str(promotion.id), "code": promotion.code, "is_eligible": reason is None, "reason": reason}
        )

    logger.info("Checked promotion eligibility", user_id=str(user_id), count=len(results))
    return results


def products_for_promotion(code, user_id=None, now=None) -> list[dict]:
    """In-stock products a promotion covers, with their promotional price.

    Hidden promotions are only shown to signed-in users who qualify.
    """
    promotion = find_promotion_by_code(code)

    is_eligible = False
    if user_id:
        is_eligible = ineligibility_reason(promotion, customer_profile(user_id), now) is None
    if not promotion.is_visible:
        if not user_id:
            raise ForbiddenError("Log in to check eligibility for this promotion", {"code": promotion.code})
        if not is_eligible:
            raise ForbiddenError("You don't qualify for this promotion", {"code": promotion.code})

    covered = [
        product
        for product in find_all(Product)
        if promotion.covers_product(product) and (product.default_quantity or 0) > 0
    ]

    results = []
    for product in covered:
        if product.default_quantity < setting("LOW_STOCK_THRESHOLD"):
            logger.warning("Low stock for promoted product", product_id=str(product.id), name=product.name)
        if product.default_price is None:
            continue
        results.append(
            {
                "product": product,
                "original_price": product.default_price,
                "discounted_price": promotion.calculate_discounted_price(product.default_price),
                "is_eligible": is_eligible,
            }
        )
    return results


def best_promotions_for_cart(user_id, now=None) -> dict:
    """The promotions that would apply together to the user's cart right now."""
    try:
        cart = current_domain.repository_for(Cart).get(str(user_id))
    except ObjectNotFoundError:
        return {"subtotal": 0.0, "promotions": [], "total_discount": 0.0}

    products = cart_products(cart)
    subtotal = cart.subtotal_for(live_prices(products.values(), now))
    customer = customer_profile(user_id)

    candidates = []
    for promotion in find_all(Promotion, is_active=True):
        if promotion.status(now) != PromotionStatus.ACTIVE.value:
            continue
        if ineligibility_reason(promotion, customer, now) is not None:
            continue
        targeted = promotion.applicable_product_ids or promotion.applicable_category_ids
        if targeted and not any(promotion.covers_product(p) for p in products.values()):
            continue
        if subtotal < (promotion.minimum_purchase or 0.0):
            continue
        candidates.append(promotion)

    selected = select_promotions(candidates)
    offers = [
        {
            "promotion": promotion,
            "discount_amount": promotion.calculate_discount_amount(subtotal),
            "free_shipping": promotion.is_free_shipping,
        }
        for promotion in selected
    ]
    return {
        "subtotal": round_money(subtotal),
        "promotions": offers,
        "total_discount": round_money(min(subtotal, sum(o["discount_amount"] for o in offers))),
    }
