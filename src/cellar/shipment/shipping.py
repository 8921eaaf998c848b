"""Shipping cost and delivery-date estimates."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from cellar.config import setting
from cellar.errors import InvalidError
from cellar.shared.money import round_money


class ShippingMethod(Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"


BASE_COST = {
    ShippingMethod.STANDARD.value: 5.99,
    ShippingMethod.EXPRESS.value: 12.99,
    ShippingMethod.OVERNIGHT.value: 24.99,
}

DELIVERY_DAYS = {
    ShippingMethod.STANDARD.value: 5,
    ShippingMethod.EXPRESS.value: 3,
    ShippingMethod.OVERNIGHT.value: 1,
}

PER_KG_SURCHARGE = 1.5
INTERNATIONAL_FACTOR = 2.5


@dataclass(frozen=True)
class ShippingQuote:
    shipping_method: str
    shipping_cost: float
    estimated_delivery_date: datetime


def quote_shipping(shipping_method, weight_kg, country, now=None) -> ShippingQuote:
    """Price a parcel: base cost by method, a surcharge per started kilogram
    beyond the first, and a multiplier for destinations abroad."""
    if shipping_method not in BASE_COST:
        raise InvalidError("Unknown shipping method", {"shipping_method": shipping_method})
    if weight_kg is None or weight_kg <= 0:
        raise InvalidError("Weight must be positive", {"weight": weight_kg})

    extra_kg = max(0, math.ceil(weight_kg) - 1)
    cost = BASE_COST[shipping_method] + extra_kg * PER_KG_SURCHARGE
    if (country or "").strip().lower() != setting("DOMESTIC_COUNTRY").lower():
        cost *= INTERNATIONAL_FACTOR

    now = now or datetime.now(UTC)
    return ShippingQuote(
        shipping_method=shipping_method,
        shipping_cost=round_money(cost),
        estimated_delivery_date=now + timedelta(days=DELIVERY_DAYS[shipping_method]),
    )
