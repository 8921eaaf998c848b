"""Catalogue routes: categories, suppliers and products."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from cellar.api.deps import admin_user_id, optional_user_id
from cellar.api.responses import ok, serialize
from cellar.api.schemas import (
    CategoryRequest,
    CategoryUpdateRequest,
    CreateProductRequest,
    SupplierOfferSchema,
    SupplierRequest,
    SupplierUpdateRequest,
    UpdateProductRequest,
)
from cellar.catalogue.category.category import Category
from cellar.catalogue.category.management import CreateCategory, DeleteCategory, UpdateCategory
from cellar.catalogue.product.management import (
    AddSupplierOffer,
    CreateProduct,
    DeleteProduct,
    RemoveSupplierOffer,
    UpdateProductDetails,
)
from cellar.catalogue.product.product import Product
from cellar.catalogue.queries import list_categories, list_products, list_suppliers
from cellar.catalogue.supplier.management import CreateSupplier, DeleteSupplier, UpdateSupplier
from cellar.catalogue.supplier.supplier import Supplier
from cellar.favorite.management import is_favorite
from cellar.flash_sale.pricing import effective_unit_price
from cellar.shared.lookup import load


def product_card(product) -> dict:
    return serialize(product, effective_price=effective_unit_price(product))


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
category_router = APIRouter(prefix="/categories", tags=["categories"])


@category_router.get("")
async def get_categories() -> dict:
    return ok([serialize(c) for c in list_categories()])


@category_router.get("/{category_id}")
async def get_category(category_id: str) -> dict:
    return ok(serialize(load(Category, category_id)))


@category_router.post("", status_code=201)
async def create_category(body: CategoryRequest, _admin: str = Depends(admin_user_id)) -> dict:
    command = CreateCategory(name=body.name, description=body.description, image_url=body.image_url)
    category_id = current_domain.process(command, asynchronous=False)
    return ok(serialize(load(Category, category_id)))


@category_router.put("/{category_id}")
async def update_category(category_id: str, body: CategoryUpdateRequest, _admin: str = Depends(admin_user_id)) -> dict:
    command = UpdateCategory(category_id=category_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(serialize(load(Category, category_id)))


@category_router.delete("/{category_id}")
async def delete_category(category_id: str, _admin: str = Depends(admin_user_id)) -> dict:
    current_domain.process(DeleteCategory(category_id=category_id), asynchronous=False)
    return ok(message="Category deleted")


# ---------------------------------------------------------------------------
# Suppliers
# ---------------------------------------------------------------------------
supplier_router = APIRouter(prefix="/suppliers", tags=["suppliers"])


@supplier_router.get("")
async def get_suppliers(_admin: str = Depends(admin_user_id)) -> dict:
    return ok([serialize(s) for s in list_suppliers()])


@supplier_router.post("", status_code=201)
async def create_supplier(body: SupplierRequest, _admin: str = Depends(admin_user_id)) -> dict:
    command = CreateSupplier(name=body.name, contact=body.contact, location=body.location)
    supplier_id = current_domain.process(command, asynchronous=False)
    return ok(serialize(load(Supplier, supplier_id)))


@supplier_router.put("/{supplier_id}")
async def update_supplier(supplier_id: str, body: SupplierUpdateRequest, _admin: str = Depends(admin_user_id)) -> dict:
    command = UpdateSupplier(supplier_id=supplier_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(serialize(load(Supplier, supplier_id)))


@supplier_router.delete("/{supplier_id}")
async def delete_supplier(supplier_id: str, _admin: str = Depends(admin_user_id)) -> dict:
    current_domain.process(DeleteSupplier(supplier_id=supplier_id), asynchronous=False)
    return ok(message="Supplier deleted")


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("")
async def get_products(
    category_id: str | None = Query(default=None, alias="categoryId"),
    search: str | None = None,
    in_stock: bool | None = Query(default=None, alias="inStock"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> dict:
    products, total = list_products(category_id, search, in_stock, page, limit)
    return ok([product_card(p) for p in products], total=total, page=page, limit=limit)


@product_router.get("/{product_id}")
async def get_product(product_id: str, user_id: str | None = Depends(optional_user_id)) -> dict:
    card = product_card(load(Product, product_id))
    card["is_favorited"] = bool(user_id) and is_favorite(user_id, product_id)
    return ok(card)


@product_router.post("", status_code=201)
async def create_product(body: CreateProductRequest, _admin: str = Depends(admin_user_id)) -> dict:
    details = body.model_dump(mode="json", exclude={"offers"})
    command = CreateProduct(**details, offers=json.dumps([o.model_dump(mode="json") for o in body.offers]))
    product_id = current_domain.process(command, asynchronous=False)
    return ok(product_card(load(Product, product_id)))


@product_router.put("/{product_id}")
async def update_product(product_id: str, body: UpdateProductRequest, _admin: str = Depends(admin_user_id)) -> dict:
    command = UpdateProductDetails(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(product_card(load(Product, product_id)))


@product_router.delete("/{product_id}")
async def delete_product(product_id: str, _admin: str = Depends(admin_user_id)) -> dict:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return ok(message="Product deleted")


@product_router.post("/{product_id}/offers", status_code=201)
async def add_offer(product_id: str, body: SupplierOfferSchema, _admin: str = Depends(admin_user_id)) -> dict:
    command = AddSupplierOffer(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(product_card(load(Product, product_id)))


@product_router.delete("/{product_id}/offers/{supplier_id}")
async def remove_offer(product_id: str, supplier_id: str, _admin: str = Depends(admin_user_id)) -> dict:
    current_domain.process(RemoveSupplierOffer(product_id=product_id, supplier_id=supplier_id), asynchronous=False)
    return ok(product_card(load(Product, product_id)))
