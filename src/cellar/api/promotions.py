"""Promotion routes."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from cellar.api.catalogue import product_card
from cellar.api.deps import admin_user_id, current_user_id, is_admin, optional_user_id
from cellar.api.responses import ok, serialize
from cellar.api.schemas import BulkEligibilityRequest, CreatePromotionRequest, UpdatePromotionRequest
from cellar.promotion.management import CreatePromotion, DeletePromotion, UpdatePromotion
from cellar.promotion.queries import (
    best_promotions_for_cart,
    check_bulk_eligibility,
    find_promotion_by_code,
    get_promotion,
    list_promotions,
    products_for_promotion,
)

promotion_router = APIRouter(prefix="/promotions", tags=["promotions"])


def _promotion_body(promotion) -> dict:
    return serialize(promotion, status=promotion.status())


@promotion_router.get("")
async def get_promotions(
    status: str | None = None,
    discount_type: str | None = Query(default=None, alias="discountType"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    admin: bool = Depends(is_admin),
) -> dict:
    promotions, total = list_promotions(
        include_hidden=admin, status=status, discount_type=discount_type, page=page, limit=limit
    )
    return ok([_promotion_body(p) for p in promotions], total=total, page=page, limit=limit)


@promotion_router.get("/best")
async def best_for_cart(user_id: str = Depends(current_user_id)) -> dict:
    result = best_promotions_for_cart(user_id)
    offers = [
        {
            "promotion": _promotion_body(offer["promotion"]),
            "discount_amount": offer["discount_amount"],
            "free_shipping": offer["free_shipping"],
        }
        for offer in result["promotions"]
    ]
    return ok({**result, "promotions": offers})


@promotion_router.post("/eligibility")
async def bulk_eligibility(body: BulkEligibilityRequest, user_id: str = Depends(current_user_id)) -> dict:
    return ok(check_bulk_eligibility(user_id, body.promotion_ids))


@promotion_router.get("/code/{code}")
async def get_by_code(code: str) -> dict:
    return ok(_promotion_body(find_promotion_by_code(code)))


@promotion_router.get("/code/{code}/products")
async def promotion_products(code: str, user_id: str | None = Depends(optional_user_id)) -> dict:
    results = products_for_promotion(code, user_id)
    return ok(
        [
            {
                "product": product_card(entry["product"]),
                "original_price": entry["original_price"],
                "discounted_price": entry["discounted_price"],
                "is_eligible": entry["is_eligible"],
            }
            for entry in results
        ]
    )


@promotion_router.get("/{promotion_id}")
async def get_promotion_by_id(promotion_id: str) -> dict:
    return ok(_promotion_body(get_promotion(promotion_id)))


@promotion_router.post("", status_code=201)
async def create_promotion(body: CreatePromotionRequest, _admin: str = Depends(admin_user_id)) -> dict:
    promotion_id = current_domain.process(CreatePromotion(**body.model_dump()), asynchronous=False)
    return ok(_promotion_body(get_promotion(promotion_id)))


@promotion_router.put("/{promotion_id}")
async def update_promotion(
    promotion_id: str, body: UpdatePromotionRequest, _admin: str = Depends(admin_user_id)
) -> dict:
    command = UpdatePromotion(promotion_id=promotion_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(_promotion_body(get_promotion(promotion_id)))


@promotion_router.delete("/{promotion_id}")
async def delete_promotion(promotion_id: str, _admin: str = Depends(admin_user_id)) -> dict:
    current_domain.process(DeletePromotion(promotion_id=promotion_id), asynchronous=False)
    return ok(message="Promotion deleted")
