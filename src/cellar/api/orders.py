"""Order routes: checkout, payment capture and status administration."""

import structlog
from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from cellar.api.deps import admin_user_id, current_user_id, is_admin
from cellar.api.responses import ok, serialize
from cellar.api.schemas import CreateOrderRequest, PurchaseRequest, UpdateOrderStatusRequest
from cellar.order.creation import CreateOrder
from cellar.order.order import Order
from cellar.order.payment import CapturePayment
from cellar.order.queries import all_orders, order_for, orders_of
from cellar.order.status import UpdateOrderStatus
from cellar.shared.lookup import load

logger = structlog.get_logger(__name__)

order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def create_order(body: CreateOrderRequest, user_id: str = Depends(current_user_id)) -> dict:
    if body.sub_total is not None:
        logger.debug("Ignoring client-sent subtotal", user_id=user_id, sub_total=body.sub_total)
    command = CreateOrder(user_id=user_id, note=body.note, promotion_code=body.promotion_code)
    order_id = current_domain.process(command, asynchronous=False)
    return ok(serialize(load(Order, order_id)), message="Order created")


@order_router.get("/mine")
async def my_orders(user_id: str = Depends(current_user_id)) -> dict:
    return ok([serialize(o) for o in orders_of(user_id)])


@order_router.get("")
async def get_orders(status: str | None = None, _admin: str = Depends(admin_user_id)) -> dict:
    return ok([serialize(o) for o in all_orders(status)])


@order_router.get("/{order_id}")
async def get_order(order_id: str, user_id: str = Depends(current_user_id), admin: bool = Depends(is_admin)) -> dict:
    order = load(Order, order_id, "Order") if admin else order_for(user_id, order_id)
    return ok(serialize(order))


@order_router.put("/{order_id}/purchase")
async def purchase_order(order_id: str, body: PurchaseRequest, user_id: str = Depends(current_user_id)) -> dict:
    command = CapturePayment(
        order_id=order_id,
        user_id=user_id,
        payment_method=body.payment_method,
        description=body.description,
        currency=body.currency,
    )
    result = current_domain.process(command, asynchronous=False)
    return ok(result, message="Payment successful")


@order_router.put("/{order_id}/status")
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, _admin: str = Depends(admin_user_id)
) -> dict:
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    return ok(serialize(load(Order, order_id)))
