"""Flash sale routes."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from cellar.api.catalogue import product_card
from cellar.api.deps import admin_user_id
from cellar.api.responses import ok, serialize
from cellar.api.schemas import CreateFlashSaleRequest, UpdateFlashSaleRequest
from cellar.flash_sale.management import CreateFlashSale, DeleteFlashSale, UpdateFlashSale
from cellar.flash_sale.queries import active_flash_sales, all_flash_sales, flash_sale_products, get_flash_sale

flash_sale_router = APIRouter(prefix="/flash-sales", tags=["flash-sales"])


def _sale_body(sale) -> dict:
    return serialize(
        sale,
        status=sale.status(),
        time_remaining=sale.time_remaining(),
        time_remaining_ms=sale.time_remaining_ms(),
        starts_in_ms=sale.starts_in_ms(),
    )


def _products_json(products) -> str:
    return json.dumps([p.model_dump(exclude_none=True) for p in products])


@flash_sale_router.post("", status_code=201)
async def create_flash_sale(body: CreateFlashSaleRequest, _admin: str = Depends(admin_user_id)) -> dict:
    details = body.model_dump(exclude={"products"})
    command = CreateFlashSale(**details, products=_products_json(body.products))
    sale_id = current_domain.process(command, asynchronous=False)
    return ok(_sale_body(get_flash_sale(sale_id)))


@flash_sale_router.get("/active")
async def get_active_flash_sales() -> dict:
    return ok([_sale_body(s) for s in active_flash_sales()])


@flash_sale_router.get("")
async def get_flash_sales(_admin: str = Depends(admin_user_id)) -> dict:
    return ok([_sale_body(s) for s in all_flash_sales()])


@flash_sale_router.get("/{flash_sale_id}")
async def get_flash_sale_by_id(flash_sale_id: str) -> dict:
    return ok(_sale_body(get_flash_sale(flash_sale_id)))


@flash_sale_router.get("/{flash_sale_id}/products")
async def get_flash_sale_products(flash_sale_id: str) -> dict:
    return ok(
        [
            {
                "product": product_card(entry["product"]),
                "original_price": entry["original_price"],
                "special_price": entry["special_price"],
                "discount_percentage": entry["discount_percentage"],
            }
            for entry in flash_sale_products(flash_sale_id)
        ]
    )


@flash_sale_router.put("/{flash_sale_id}")
async def update_flash_sale(
    flash_sale_id: str, body: UpdateFlashSaleRequest, _admin: str = Depends(admin_user_id)
) -> dict:
    details = body.model_dump(exclude={"products"}, exclude_none=True)
    if body.products is not None:
        details["products"] = _products_json(body.products)
    current_domain.process(UpdateFlashSale(flash_sale_id=flash_sale_id, **details), asynchronous=False)
    return ok(_sale_body(get_flash_sale(flash_sale_id)))


@flash_sale_router.delete("/{flash_sale_id}")
async def delete_flash_sale(flash_sale_id: str, _admin: str = Depends(admin_user_id)) -> dict:
    current_domain.process(DeleteFlashSale(flash_sale_id=flash_sale_id), asynchronous=False)
    return ok(message="Flash sale deleted")
