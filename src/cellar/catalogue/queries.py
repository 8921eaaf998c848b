"""Catalogue read helpers for storefront listings."""

from cellar.catalogue.category.category import Category
from cellar.catalogue.product.product import Product
from cellar.catalogue.supplier.supplier import Supplier
from cellar.shared.lookup import find_all


def list_categories() -> list:
    return sorted(find_all(Category), key=lambda c: c.name.lower())


def list_suppliers() -> list:
    return sorted(find_all(Supplier), key=lambda s: s.name.lower())


def list_products(category_id=None, search=None, in_stock=None, page=1, limit=20):
    products = find_all(Product, category_id=str(category_id)) if category_id else find_all(Product)
    if search:
        needle = search.strip().lower()
        products = [
            p
            for p in products
            if needle in p.name.lower() or needle in (p.region or "").lower() or needle in (p.grape or "").lower()
        ]
    if in_stock is not None:
        products = [p for p in products if ((p.default_quantity or 0) > 0) == in_stock]

    products.sort(key=lambda p: p.name.lower())
    start = (page - 1) * limit
    return products[start : start + limit], len(products)
