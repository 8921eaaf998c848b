from cellar.api.analytics import analytics_router
from cellar.api.cart import cart_router
from cellar.api.catalogue import category_router, product_router, supplier_router
from cellar.api.coupons import coupon_router
from cellar.api.customers import favorite_router, review_router
from cellar.api.flash_sales import flash_sale_router
from cellar.api.notifications import notification_router
from cellar.api.orders import order_router
from cellar.api.promotions import promotion_router
from cellar.api.shipments import shipment_router

ROUTERS = [
    category_router,
    supplier_router,
    product_router,
    cart_router,
    coupon_router,
    promotion_router,
    flash_sale_router,
    order_router,
    shipment_router,
    favorite_router,
    review_router,
    notification_router,
    analytics_router,
]

__all__ = [
    "ROUTERS",
    "analytics_router",
    "cart_router",
    "category_router",
    "coupon_router",
    "favorite_router",
    "flash_sale_router",
    "notification_router",
    "order_router",
    "product_router",
    "promotion_router",
    "review_router",
    "shipment_router",
    "supplier_router",
]
