"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from cellar.domain import cellar


@cellar.event(part_of="Order")
class OrderCreated:
    """An order was placed from a user's cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    item_count = Integer(required=True)
    sub_total = Float(required=True)
    shipping_cost = Float(required=True)
    total_cost = Float(required=True)
    promotion_code = String(max_length=20)
    status = String(required=True, max_length=20)
    created_at = DateTime(required=True)


@cellar.event(part_of="Order")
class OrderStatusChanged:
    """An order moved to a new status, including being paid."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    status = String(required=True, max_length=20)
    tracking_number = String(max_length=10)
    changed_at = DateTime(required=True)
