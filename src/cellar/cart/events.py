"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from cellar.domain import cellar


@cellar.event(part_of="Cart")
class CartUpdated:
    """Items, quantities or the coupon on a cart changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    action = String(required=True, max_length=50)
    product_id = Identifier()
    item_count = Integer(default=0)
    total = Float(default=0.0)


@cellar.event(part_of="Cart")
class CartCleared:
    """A cart was emptied, explicitly or by checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
