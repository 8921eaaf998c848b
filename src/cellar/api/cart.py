"""Cart routes. Cart lines are addressed by product id."""

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from cellar.api.deps import current_user_id
from cellar.api.responses import ok, serialize
from cellar.api.schemas import AddToCartRequest, ApplyCouponRequest, UpdateCartItemRequest
from cellar.cart.cart import Cart
from cellar.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from cellar.cart.items import (
    AddToCart,
    DecrementCartItem,
    IncrementCartItem,
    RemoveCartItem,
    UpdateCartItem,
)
from cellar.cart.management import ClearCart, RecalculateCart

cart_router = APIRouter(prefix="/cart", tags=["cart"])

_EMPTY_TOTALS = {"subtotal": 0.0, "discount": 0.0, "total": 0.0}


def _cart_body(user_id):
    try:
        cart = current_domain.repository_for(Cart).get(str(user_id))
    except ObjectNotFoundError:
        return {"user_id": user_id, "items": [], "coupon": None, "pricing": dict(_EMPTY_TOTALS)}
    return serialize(cart)


@cart_router.get("")
async def get_cart(user_id: str = Depends(current_user_id)) -> dict:
    return ok(_cart_body(user_id))


@cart_router.post("/add", status_code=201)
async def add_to_cart(body: AddToCartRequest, user_id: str = Depends(current_user_id)) -> dict:
    command = AddToCart(user_id=user_id, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return ok(_cart_body(user_id), message="Item added to cart")


@cart_router.get("/total")
async def cart_total(user_id: str = Depends(current_user_id)) -> dict:
    try:
        current_domain.repository_for(Cart).get(str(user_id))
    except ObjectNotFoundError:
        return ok(dict(_EMPTY_TOTALS))
    totals = current_domain.process(RecalculateCart(user_id=user_id), asynchronous=False)
    return ok(totals)


@cart_router.post("/coupon")
async def apply_coupon(body: ApplyCouponRequest, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(ApplyCouponToCart(user_id=user_id, coupon_code=body.coupon_code), asynchronous=False)
    return ok(_cart_body(user_id), message="Coupon applied")


@cart_router.delete("/coupon")
async def remove_coupon(user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(RemoveCouponFromCart(user_id=user_id), asynchronous=False)
    return ok(_cart_body(user_id), message="Coupon removed")


@cart_router.delete("")
async def clear_cart(user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(ClearCart(user_id=user_id), asynchronous=False)
    return ok(_cart_body(user_id), message="Cart cleared")


@cart_router.post("/{item_id}/increment")
async def increment_item(item_id: str, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(IncrementCartItem(user_id=user_id, product_id=item_id), asynchronous=False)
    return ok(_cart_body(user_id))


@cart_router.post("/{item_id}/decrement")
async def decrement_item(item_id: str, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(DecrementCartItem(user_id=user_id, product_id=item_id), asynchronous=False)
    return ok(_cart_body(user_id))


@cart_router.put("/{item_id}")
async def update_item(item_id: str, body: UpdateCartItemRequest, user_id: str = Depends(current_user_id)) -> dict:
    command = UpdateCartItem(user_id=user_id, product_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return ok(_cart_body(user_id))


@cart_router.delete("/{item_id}")
async def remove_item(item_id: str, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(RemoveCartItem(user_id=user_id, product_id=item_id), asynchronous=False)
    return ok(_cart_body(user_id), message="Item removed from cart")
