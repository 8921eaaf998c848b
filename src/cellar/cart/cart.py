"""Cart aggregate: one per user, with line items and a derived pricing snapshot.

The cart is keyed by the owning user's id, so there is never more than one
cart per user. Every mutating method takes ``prices``, a mapping of product
id to the product's live effective unit price, and recomputes the pricing
snapshot from it. The snapshot is never set directly:

    subtotal = Σ unit_price × quantity
    discount = subtotal × rate / 100          (percentage coupon)
             = min(subtotal, amount)          (fixed coupon)
    total    = max(0, subtotal − discount)

Values are rounded to cents only when they are stored on the snapshot.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from cellar.cart.events import CartCleared, CartUpdated
from cellar.coupon.coupon import DiscountType, discount_for
from cellar.domain import cellar
from cellar.errors import InvalidError, NotFoundError
from cellar.shared.money import money_equal, round_money


@cellar.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(default=0.0, min_value=0.0)
    added_at = DateTime()


@cellar.value_object(part_of="Cart")
class AppliedCoupon:
    coupon_id = Identifier(required=True)
    code = String(required=True, max_length=20)
    discount_value = Float(required=True, min_value=0.0)
    discount_type = String(required=True, choices=DiscountType)


@cellar.value_object(part_of="Cart")
class CartPricing:
    subtotal = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)


_EMPTY_PRICING = {"subtotal": 0.0, "discount": 0.0, "total": 0.0}


@cellar.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    coupon = ValueObject(AppliedCoupon)
    pricing = ValueObject(CartPricing)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def pricing_must_match_items_and_coupon(self):
        if self.pricing is None:
            return

        subtotal = round_money(sum(item.unit_price * item.quantity for item in self.items))
        if not money_equal(self.pricing.subtotal, subtotal):
            raise ValidationError({"pricing": ["Cart subtotal does not match its items"]})

        if self.coupon is None and self.pricing.discount:
            raise ValidationError({"pricing": ["Cart discount without an applied coupon"]})

        if not money_equal(self.pricing.total, max(0.0, self.pricing.subtotal - self.pricing.discount)):
            raise ValidationError({"pricing": ["Cart total must equal subtotal minus discount"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(
            id=str(user_id),
            user_id=user_id,
            pricing=CartPricing(**_EMPTY_PRICING),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def quantity_of(self, product_id):
        item = self.item_for(product_id)
        return item.quantity if item else 0

    def product_ids(self):
        return [str(item.product_id) for item in self.items]

    def require_item(self, product_id):
        item = self.item_for(product_id)
        if item is None:
            raise NotFoundError("Item not found in cart", {"product_id": str(product_id)})
        return item

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def subtotal_for(self, prices):
        """Unrounded subtotal of the current items at the given prices."""
        return sum(prices.get(str(item.product_id), item.unit_price) * item.quantity for item in self.items)

    def _recompute(self, prices):
        for item in self.items:
            item.unit_price = round_money(prices.get(str(item.product_id), item.unit_price))

        subtotal = self.subtotal_for(prices)
        discount = 0.0
        if self.coupon is not None:
            discount = discount_for(self.coupon.discount_type, self.coupon.discount_value, subtotal)

        stored_subtotal = round_money(subtotal)
        stored_discount = round_money(discount)
        self.pricing = CartPricing(
            subtotal=stored_subtotal,
            discount=stored_discount,
            total=round_money(max(0.0, stored_subtotal - stored_discount)),
        )

    def _touch(self, prices):
        self._recompute(prices)
        self.updated_at = datetime.now(UTC)

    def _raise_updated(self, action, product_id=None):
        self.raise_(
            CartUpdated(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                action=action,
                product_id=str(product_id) if product_id else None,
                item_count=sum(item.quantity for item in self.items),
                total=self.pricing.total,
            )
        )

    def reprice(self, prices):
        """Refresh unit prices and the pricing snapshot from live prices."""
        with atomic_change(self):
            self._touch(prices)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, prices):
        """Add a product, summing quantities when it is already in the cart."""
        if quantity < 1:
            raise InvalidError("Quantity must be at least 1", {"quantity": quantity})

        with atomic_change(self):
            existing = self.item_for(product_id)
            if existing:
                existing.quantity += quantity
            else:
                self.add_items(
                    CartItem(
                        product_id=product_id,
                        quantity=quantity,
                        unit_price=round_money(prices.get(str(product_id), 0.0)),
                        added_at=datetime.now(UTC),
                    )
                )
            self._touch(prices)

        self._raise_updated("item_added", product_id)

    def update_item_quantity(self, product_id, quantity, prices):
        if quantity is None or quantity < 1:
            raise InvalidError("Quantity must be at least 1", {"quantity": quantity})

        item = self.require_item(product_id)
        with atomic_change(self):
            item.quantity = quantity
            self._touch(prices)

        self._raise_updated("quantity_updated", product_id)

    def remove_item(self, product_id, prices):
        item = self.require_item(product_id)
        with atomic_change(self):
            self.remove_items(item)
            self._touch(prices)

        self._raise_updated("item_removed", product_id)

    def increment_item(self, product_id, prices):
        item = self.require_item(product_id)
        with atomic_change(self):
            item.quantity += 1
            self._touch(prices)

        self._raise_updated("item_incremented", product_id)

    def decrement_item(self, product_id, prices):
        """Decrease by one; a line at quantity 1 is removed rather than left at zero."""
        item = self.require_item(product_id)
        with atomic_change(self):
            if item.quantity <= 1:
                self.remove_items(item)
            else:
                item.quantity -= 1
            self._touch(prices)

        self._raise_updated("item_decremented", product_id)

    def clear(self):
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self.coupon = None
            self.pricing = CartPricing(**_EMPTY_PRICING)
            self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id)))

    # -------------------------------------------------------------------
    # Coupon management
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon, prices):
        """Attach a coupon snapshot, replacing any coupon already applied.

        Args:
            coupon: an ``AppliedCoupon`` built from a coupon that has passed
                its validity and minimum-purchase checks.
        """
        with atomic_change(self):
            self.coupon = coupon
            self._touch(prices)

        self._raise_updated("coupon_applied")

    def remove_coupon(self, prices):
        if self.coupon is None:
            raise InvalidError("No coupon applied to cart")

        with atomic_change(self):
            self.coupon = None
            self._touch(prices)

        self._raise_updated("coupon_removed")
