"""Coupon routes: admin CRUD plus code lookup and validation."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from cellar.api.deps import admin_user_id, current_user_id
from cellar.api.responses import ok, serialize
from cellar.api.schemas import CreateCouponRequest, UpdateCouponRequest, ValidateCouponRequest
from cellar.coupon.coupon import Coupon
from cellar.coupon.management import (
    CreateCoupon,
    DeleteCoupon,
    UpdateCoupon,
    find_coupon_by_code,
    list_coupons,
    validate_coupon,
)
from cellar.shared.lookup import load

coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


def _coupon_body(coupon) -> dict:
    return serialize(coupon, is_expired=coupon.is_expired())


@coupon_router.get("")
async def get_coupons(
    active: bool | None = None,
    sort: str | None = Query(default=None, pattern="^(discount|expiry|created)$"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    _admin: str = Depends(admin_user_id),
) -> dict:
    result = list_coupons(active=active, sort=sort, page=page, limit=limit)
    return ok([_coupon_body(c) for c in result["coupons"]], pagination=result["pagination"])


@coupon_router.post("", status_code=201)
async def create_coupon(body: CreateCouponRequest, admin_id: str = Depends(admin_user_id)) -> dict:
    command = CreateCoupon(**body.model_dump(), created_by=admin_id)
    coupon_id = current_domain.process(command, asynchronous=False)
    return ok(_coupon_body(load(Coupon, coupon_id)))


@coupon_router.post("/validate")
async def validate(body: ValidateCouponRequest, _user: str = Depends(current_user_id)) -> dict:
    return ok(validate_coupon(body.code, body.order_amount))


@coupon_router.get("/{code}")
async def get_coupon_by_code(code: str, _user: str = Depends(current_user_id)) -> dict:
    return ok(_coupon_body(find_coupon_by_code(code)))


@coupon_router.put("/{coupon_id}")
async def update_coupon(coupon_id: str, body: UpdateCouponRequest, _admin: str = Depends(admin_user_id)) -> dict:
    command = UpdateCoupon(coupon_id=coupon_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(_coupon_body(load(Coupon, coupon_id)))


@coupon_router.delete("/{coupon_id}")
async def delete_coupon(coupon_id: str, _admin: str = Depends(admin_user_id)) -> dict:
    current_domain.process(DeleteCoupon(coupon_id=coupon_id), asynchronous=False)
    return ok(message="Coupon deleted")
