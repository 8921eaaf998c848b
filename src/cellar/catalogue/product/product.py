"""Product aggregate root with SupplierOffer entity.

A product's selling defaults (price, stock, discount) are either set
explicitly or derived from its supplier offers: the cheapest offer sets the
price and discount, and stock is the sum of every offer's quantity.

The product also carries a denormalised back-reference to the flash sale it
is currently part of (``current_flash_sale_id`` / ``flash_sale_price``). The
flash sale aggregate owns that link; a product is never part of two sales
at once.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from cellar.domain import cellar
from cellar.errors import ConflictError, InsufficientInventoryError, InvalidError
from cellar.shared.money import round_money


@cellar.entity(part_of="Product")
class SupplierOffer:
    supplier_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=0)
    discount = Float(default=0.0, min_value=0.0)
    restock_date = DateTime()


@cellar.aggregate
class Product:
    name = String(required=True, max_length=200)
    description = Text()
    category_id = Identifier()
    image_url = String(max_length=500)
    alcohol_content = Float(min_value=0.0, max_value=100.0)
    vintage = Integer(min_value=1800)
    region = String(max_length=100)
    grape = String(max_length=100)
    brand = String(max_length=100)
    weight_kg = Float(default=0.75, min_value=0.0)

    rating = Float(default=0.0, min_value=0.0, max_value=5.0)
    review_count = Integer(default=0, min_value=0)

    suppliers = HasMany(SupplierOffer)
    default_price = Float(min_value=0.0)
    default_quantity = Integer(default=0, min_value=0)
    default_discount = Float(default=0.0, min_value=0.0)
    explicit_price = Boolean(default=False)
    explicit_quantity = Boolean(default=False)
    explicit_discount = Boolean(default=False)

    current_flash_sale_id = Identifier()
    flash_sale_price = Float(min_value=0.0)

    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def flash_sale_link_must_carry_a_price(self):
        if self.current_flash_sale_id and self.flash_sale_price is None:
            raise ValidationError({"flash_sale_price": ["A flash-sale product needs a special price"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        category_id=None,
        description=None,
        image_url=None,
        alcohol_content=None,
        vintage=None,
        region=None,
        grape=None,
        brand=None,
        weight_kg=None,
        default_price=None,
        default_quantity=None,
        default_discount=None,
        offers=None,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            category_id=category_id,
            description=description,
            image_url=image_url,
            alcohol_content=alcohol_content,
            vintage=vintage,
            region=region,
            grape=grape,
            brand=brand,
            weight_kg=weight_kg if weight_kg is not None else 0.75,
            default_price=round_money(default_price) if default_price is not None else None,
            default_quantity=default_quantity or 0,
            default_discount=default_discount or 0.0,
            explicit_price=default_price is not None,
            explicit_quantity=default_quantity is not None,
            explicit_discount=default_discount is not None,
            created_at=now,
            updated_at=now,
        )
        for offer in offers or []:
            product.add_suppliers(SupplierOffer(**offer))
        product.derive_defaults()
        return product

    # -------------------------------------------------------------------
    # Defaults
    # -------------------------------------------------------------------
    def derive_defaults(self):
        """Fill in every default that was not set explicitly from the supplier offers."""
        if not self.suppliers:
            return

        cheapest = min(self.suppliers, key=lambda offer: offer.price)
        with atomic_change(self):
            if not self.explicit_price:
                self.default_price = round_money(cheapest.price)
            if not self.explicit_discount:
                self.default_discount = cheapest.discount or 0.0
            if not self.explicit_quantity:
                self.default_quantity = sum(offer.quantity for offer in self.suppliers)

    def update_details(self, **details):
        pricing_keys = {"default_price", "default_quantity", "default_discount"}
        with atomic_change(self):
            for key, value in details.items():
                if value is None:
                    continue
                if key in pricing_keys:
                    setattr(self, key, round_money(value) if key == "default_price" else value)
                    setattr(self, key.replace("default_", "explicit_"), True)
                else:
                    setattr(self, key, value)
            self.updated_at = datetime.now(UTC)

    def add_offer(self, supplier_id, price, quantity, discount=0.0, restock_date=None):
        if any(str(offer.supplier_id) == str(supplier_id) for offer in self.suppliers):
            raise ConflictError("Supplier already offers this product", {"supplier_id": str(supplier_id)})

        self.add_suppliers(
            SupplierOffer(
                supplier_id=supplier_id,
                price=price,
                quantity=quantity,
                discount=discount or 0.0,
                restock_date=restock_date,
            )
        )
        self.derive_defaults()
        self.updated_at = datetime.now(UTC)

    def remove_offer(self, supplier_id):
        offer = next((o for o in self.suppliers if str(o.supplier_id) == str(supplier_id)), None)
        if offer is None:
            raise InvalidError("Supplier does not offer this product", {"supplier_id": str(supplier_id)})

        self.remove_suppliers(offer)
        self.derive_defaults()
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def ensure_available(self, quantity):
        if (self.default_quantity or 0) < quantity:
            raise InsufficientInventoryError(
                f"Insufficient stock for product: {self.name}",
                {"product_id": str(self.id), "available": self.default_quantity or 0, "requested": quantity},
            )

    def reserve_stock(self, quantity):
        """Decrement stock if enough is available; the check and the write happen together."""
        self.ensure_available(quantity)
        self.default_quantity = (self.default_quantity or 0) - quantity
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Flash sale link
    # -------------------------------------------------------------------
    def link_flash_sale(self, flash_sale_id, special_price):
        with atomic_change(self):
            self.current_flash_sale_id = flash_sale_id
            self.flash_sale_price = round_money(special_price)
            self.updated_at = datetime.now(UTC)

    def release_flash_sale(self, flash_sale_id):
        if str(self.current_flash_sale_id) != str(flash_sale_id):
            return
        with atomic_change(self):
            self.current_flash_sale_id = None
            self.flash_sale_price = None
            self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------
    def record_ratings(self, ratings):
        with atomic_change(self):
            self.review_count = len(ratings)
            self.rating = round(sum(ratings) / len(ratings), 2) if ratings else 0.0
            self.updated_at = datetime.now(UTC)
