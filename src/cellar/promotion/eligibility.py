"""Promotion eligibility and selection.

``evaluate_promotion_eligibility`` is a pure check over a promotion and a
``CustomerProfile``. ``customer_profile`` gathers the profile from the order
history and the customer's default address.
"""

from collections import Counter
from dataclasses import dataclass, field

from cellar.order.order import Order, OrderStatus
from cellar.shared.clock import ensure_utc
from cellar.shared.lookup import find_all
from cellar.shipment.management import default_address_of

# Orders that count as a completed purchase for first-purchase-only promotions
COMPLETED_STATUSES = {OrderStatus.DELIVERED.value}


@dataclass(frozen=True)
class CustomerProfile:
    user_id: str
    completed_orders: int = 0
    promotion_usage: dict = field(default_factory=dict)
    location_terms: frozenset = frozenset()

    def usage_of(self, promotion) -> int:
        return self.promotion_usage.get(str(promotion.id), 0)


def customer_profile(user_id) -> CustomerProfile:
    orders = find_all(Order, user_id=str(user_id))
    usage = Counter(
        str(order.applied_promotion.promotion_id) for order in orders if order.applied_promotion is not None
    )
    address = default_address_of(user_id)
    return CustomerProfile(
        user_id=str(user_id),
        completed_orders=sum(1 for order in orders if order.status in COMPLETED_STATUSES),
        promotion_usage=dict(usage),
        location_terms=frozenset(address.location_terms()) if address else frozenset(),
    )


def ineligibility_reason(promotion, customer, now=None) -> str | None:
    """Why ``customer`` cannot use ``promotion`` right now, or None when they can.

    Checks run in a fixed order and the first failure wins.
    """
    if promotion.is_first_purchase_only and customer.completed_orders > 0:
        return "This promotion is valid for first-time customers only"

    if promotion.usage_limit_per_user is not None and customer.usage_of(promotion) >= promotion.usage_limit_per_user:
        return "You've reached the maximum usage limit for this promotion"

    if promotion.limit_reached():
        return "This promotion has reached its usage limit"

    if not promotion.within_window(now):
        return "Invalid or expired promotion code"

    if not promotion.is_active:
        return "Invalid or expired promotion code"

    if promotion.locations and customer.location_terms:
        if not customer.location_terms.intersection(promotion.locations):
            return "This promotion is not available in your location"

    if promotion.included_user_ids and customer.user_id not in promotion.included_user_ids:
        return "You don't qualify for this promotion"
    if customer.user_id in (promotion.excluded_user_ids or []):
        return "You don't qualify for this promotion"

    return None


def evaluate_promotion_eligibility(promotion, customer, now=None) -> bool:
    return ineligibility_reason(promotion, customer, now) is None


def _rank(promotion):
    return (-promotion.priority, ensure_utc(promotion.created_at), promotion.code)


def select_promotions(eligible) -> list:
    """Pick the promotions to apply together.

    The single best non-stackable promotion (highest priority, then the
    earliest created, then the code) plus every stackable one.
    """
    exclusive = sorted((p for p in eligible if not p.stackable), key=_rank)
    stackable = sorted((p for p in eligible if p.stackable), key=_rank)
    return exclusive[:1] + stackable
