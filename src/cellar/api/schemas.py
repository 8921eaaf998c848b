"""Pydantic request schemas for the cellar API.

These are the external contracts; handlers receive Protean commands built
from them, never the schemas themselves.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Accepts both ``snake_case`` and the storefront's ``camelCase`` keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class CategoryRequest(RequestModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = None


class CategoryUpdateRequest(RequestModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    image_url: str | None = None


class SupplierRequest(RequestModel):
    name: str = Field(min_length=1, max_length=200)
    contact: str | None = None
    location: str | None = None


class SupplierUpdateRequest(RequestModel):
    name: str | None = None
    contact: str | None = None
    location: str | None = None


class SupplierOfferSchema(RequestModel):
    supplier_id: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=0)
    discount: float = Field(default=0.0, ge=0)
    restock_date: datetime | None = None


class ProductDetailsSchema(RequestModel):
    category_id: str | None = None
    description: str | None = None
    image_url: str | None = None
    alcohol_content: float | None = Field(default=None, ge=0, le=100)
    vintage: int | None = None
    region: str | None = None
    grape: str | None = None
    brand: str | None = None
    weight_kg: float | None = Field(default=None, ge=0)
    default_price: float | None = Field(default=None, ge=0)
    default_quantity: int | None = Field(default=None, ge=0)
    default_discount: float | None = Field(default=None, ge=0)


class CreateProductRequest(ProductDetailsSchema):
    name: str = Field(min_length=1, max_length=200)
    offers: list[SupplierOfferSchema] = []


class UpdateProductRequest(ProductDetailsSchema):
    name: str | None = Field(default=None, max_length=200)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(RequestModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(RequestModel):
    quantity: int


class ApplyCouponRequest(RequestModel):
    coupon_code: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------
class CreateCouponRequest(RequestModel):
    code: str = Field(min_length=4, max_length=20)
    discount_value: float = Field(ge=0, le=1000)
    discount_type: Literal["percentage", "fixed"] = "percentage"
    minimum_purchase_amount: float = Field(default=0.0, ge=0)
    expiry_date: datetime


class UpdateCouponRequest(RequestModel):
    code: str | None = Field(default=None, min_length=4, max_length=20)
    discount_value: float | None = Field(default=None, ge=0, le=1000)
    discount_type: Literal["percentage", "fixed"] | None = None
    minimum_purchase_amount: float | None = Field(default=None, ge=0)
    expiry_date: datetime | None = None
    is_active: bool | None = None


class ValidateCouponRequest(RequestModel):
    code: str
    order_amount: float = Field(ge=0)


# ---------------------------------------------------------------------------
# Promotions
# ---------------------------------------------------------------------------
class PromotionFields(RequestModel):
    description: str | None = None
    start_date: datetime | None = None
    minimum_purchase: float | None = Field(default=None, ge=0)
    maximum_discount: float | None = Field(default=None, ge=0)
    applicable_product_ids: list[str] = []
    applicable_category_ids: list[str] = []
    is_first_purchase_only: bool | None = None
    usage_limit_per_user: int | None = Field(default=None, ge=1)
    total_usage_limit: int | None = Field(default=None, ge=1)
    is_active: bool | None = None
    is_visible: bool | None = None
    locations: list[str] = []
    included_user_ids: list[str] = []
    excluded_user_ids: list[str] = []
    priority: int | None = Field(default=None, ge=1, le=100)
    stackable: bool | None = None


class CreatePromotionRequest(PromotionFields):
    title: str = Field(min_length=1, max_length=100)
    code: str | None = None
    discount_type: Literal["percentage", "fixed", "freeShipping"]
    discount_value: float = Field(ge=0)
    end_date: datetime


class UpdatePromotionRequest(PromotionFields):
    title: str | None = Field(default=None, max_length=100)
    code: str | None = None
    discount_type: Literal["percentage", "fixed", "freeShipping"] | None = None
    discount_value: float | None = Field(default=None, ge=0)
    end_date: datetime | None = None


class BulkEligibilityRequest(RequestModel):
    promotion_ids: list[str]


# ---------------------------------------------------------------------------
# Flash sales
# ---------------------------------------------------------------------------
class FlashSaleProductSchema(RequestModel):
    product_id: str
    special_price: float | None = Field(default=None, ge=0)


class CreateFlashSaleRequest(RequestModel):
    title: str = Field(min_length=1, max_length=200)
    description: str
    start_date: datetime
    end_date: datetime
    discount_percentage: float = Field(ge=0, le=100)
    products: list[FlashSaleProductSchema]
    is_active: bool = False
    max_purchase_quantity: int | None = Field(default=None, ge=1)
    min_purchase_amount: float = Field(default=0.0, ge=0)
    total_stock: int | None = Field(default=None, ge=0)


class UpdateFlashSaleRequest(RequestModel):
    title: str | None = None
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    discount_percentage: float | None = Field(default=None, ge=0, le=100)
    products: list[FlashSaleProductSchema] | None = None
    is_active: bool | None = None
    max_purchase_quantity: int | None = Field(default=None, ge=1)
    min_purchase_amount: float | None = Field(default=None, ge=0)
    total_stock: int | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CreateOrderRequest(RequestModel):
    note: str | None = Field(default=None, max_length=255)
    promotion_code: str | None = None
    sub_total: float | None = None


class PurchaseRequest(RequestModel):
    payment_method: Literal["stripe", "paypal", "cash_on_delivery"] = "stripe"
    description: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)


class UpdateOrderStatusRequest(RequestModel):
    status: Literal["pending", "paid", "processing", "shipped", "delivered", "cancelled"]


# ---------------------------------------------------------------------------
# Shipments
# ---------------------------------------------------------------------------
class ShipmentRequest(RequestModel):
    name: str
    address: str
    apartment: str | None = None
    company: str | None = None
    city: str
    state: str
    country: str
    zip: str
    phone: str
    email: str
    note: str | None = Field(default=None, max_length=255)
    is_default: bool | None = None
    shipping_method: Literal["standard", "express", "overnight"] | None = None


class ShipmentUpdateRequest(RequestModel):
    name: str | None = None
    address: str | None = None
    apartment: str | None = None
    company: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    zip: str | None = None
    phone: str | None = None
    email: str | None = None
    note: str | None = Field(default=None, max_length=255)
    shipping_method: Literal["standard", "express", "overnight"] | None = None


class ShippingQuoteRequest(RequestModel):
    country: str
    weight: float = Field(gt=0)
    shipping_method: Literal["standard", "express", "overnight"]


# ---------------------------------------------------------------------------
# Favorites, reviews, notifications
# ---------------------------------------------------------------------------
class FavoriteRequest(RequestModel):
    product_id: str


class ReviewRequest(RequestModel):
    product_id: str
    rating: int = Field(ge=1, le=5)
    comment: str | None = None


class NotificationRequest(RequestModel):
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    type: Literal["order", "promotion", "cart_reminder", "broadcast", "system"] | None = None
    data: dict | None = None


class DeviceTokenRequest(RequestModel):
    token: str = Field(min_length=1, max_length=500)


class BroadcastRequest(RequestModel):
    title: str = Field(min_length=1, max_length=200)
    body: str = Field(min_length=1)
    data: dict | None = None
    user_ids: list[str] = []


class ProcessRemindersRequest(RequestModel):
    as_of: datetime | None = None
