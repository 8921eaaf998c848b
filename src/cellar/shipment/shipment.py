"""Shipment aggregate: a saved delivery address belonging to one user.

A user may keep several addresses; exactly one of them is the default and
orders ship to it. ``delivery_cost`` is the quote for a one-kilogram parcel
to this address with its preferred shipping method.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Float, Identifier, String

from cellar.domain import cellar
from cellar.errors import ForbiddenError
from cellar.shipment.shipping import ShippingMethod, quote_shipping


@cellar.aggregate
class Shipment:
    user_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    address = String(required=True, max_length=255)
    apartment = String(max_length=100)
    company = String(max_length=150)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    country = String(required=True, max_length=100)
    zip = String(required=True, max_length=20)
    phone = String(required=True, max_length=30)
    email = String(required=True, max_length=254)
    note = String(max_length=255)
    is_default = Boolean(default=False)
    shipping_method = String(choices=ShippingMethod, default=ShippingMethod.STANDARD.value)
    delivery_cost = Float(default=0.0, min_value=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id, is_default=False, shipping_method=None, **details):
        now = datetime.now(UTC)
        shipment = cls(
            user_id=user_id,
            is_default=is_default,
            shipping_method=shipping_method or ShippingMethod.STANDARD.value,
            created_at=now,
            updated_at=now,
            **details,
        )
        shipment.refresh_delivery_cost()
        return shipment

    def update(self, **details):
        for key, value in details.items():
            if value is not None:
                setattr(self, key, value)
        self.refresh_delivery_cost()
        self.updated_at = datetime.now(UTC)

    def refresh_delivery_cost(self):
        self.delivery_cost = quote_shipping(self.shipping_method, 1, self.country).shipping_cost

    def ensure_owned_by(self, user_id):
        if str(self.user_id) != str(user_id):
            raise ForbiddenError("Unauthorized to modify this address", {"shipment_id": str(self.id)})

    def mark_default(self):
        self.is_default = True
        self.updated_at = datetime.now(UTC)

    def unmark_default(self):
        self.is_default = False
        self.updated_at = datetime.now(UTC)

    def location_terms(self):
        """City, state and country in lower case, for location-targeted promotions."""
        return {value.strip().lower() for value in (self.city, self.state, self.country) if value}
