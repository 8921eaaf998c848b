"""Product commands: creation, detail edits, supplier offers and deletion."""

import json

import structlog
from protean import handle
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from cellar.catalogue.category.category import Category
from cellar.catalogue.product.product import Product
from cellar.catalogue.supplier.supplier import Supplier
from cellar.domain import cellar
from cellar.errors import ConflictError
from cellar.shared.lookup import load

logger = structlog.get_logger(__name__)

_DETAIL_FIELDS = (
    "name",
    "category_id",
    "description",
    "image_url",
    "alcohol_content",
    "vintage",
    "region",
    "grape",
    "brand",
    "weight_kg",
    "default_price",
    "default_quantity",
    "default_discount",
)


@cellar.command(part_of="Product")
class CreateProduct:
    name = String(required=True, max_length=200)
    category_id = Identifier()
    description = Text()
    image_url = String(max_length=500)
    alcohol_content = Float()
    vintage = Integer()
    region = String(max_length=100)
    grape = String(max_length=100)
    brand = String(max_length=100)
    weight_kg = Float()
    default_price = Float()
    default_quantity = Integer()
    default_discount = Float()
    offers = Text()  # JSON: list of {supplier_id, price, quantity, discount, restock_date}


@cellar.command(part_of="Product")
class UpdateProductDetails:
    product_id = Identifier(required=True)
    name = String(max_length=200)
    category_id = Identifier()
    description = Text()
    image_url = String(max_length=500)
    alcohol_content = Float()
    vintage = Integer()
    region = String(max_length=100)
    grape = String(max_length=100)
    brand = String(max_length=100)
    weight_kg = Float()
    default_price = Float()
    default_quantity = Integer()
    default_discount = Float()


@cellar.command(part_of="Product")
class AddSupplierOffer:
    product_id = Identifier(required=True)
    supplier_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=0)
    discount = Float(default=0.0)
    restock_date = DateTime()


@cellar.command(part_of="Product")
class RemoveSupplierOffer:
    product_id = Identifier(required=True)
    supplier_id = Identifier(required=True)


@cellar.command(part_of="Product")
class DeleteProduct:
    product_id = Identifier(required=True)


@cellar.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        if command.category_id:
            load(Category, command.category_id)

        offers = json.loads(command.offers) if command.offers else []
        for offer in offers:
            load(Supplier, offer.get("supplier_id"))

        product = Product.create(
            name=command.name,
            category_id=command.category_id,
            description=command.description,
            image_url=command.image_url,
            alcohol_content=command.alcohol_content,
            vintage=command.vintage,
            region=command.region,
            grape=command.grape,
            brand=command.brand,
            weight_kg=command.weight_kg,
            default_price=command.default_price,
            default_quantity=command.default_quantity,
            default_discount=command.default_discount,
            offers=offers,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product created", product_id=str(product.id), default_price=product.default_price)
        return str(product.id)

    @handle(UpdateProductDetails)
    def update_product_details(self, command):
        product = load(Product, command.product_id)
        if command.category_id:
            load(Category, command.category_id)

        product.update_details(**{field: getattr(command, field) for field in _DETAIL_FIELDS})
        current_domain.repository_for(Product).add(product)

    @handle(AddSupplierOffer)
    def add_supplier_offer(self, command):
        product = load(Product, command.product_id)
        load(Supplier, command.supplier_id)
        product.add_offer(
            supplier_id=command.supplier_id,
            price=command.price,
            quantity=command.quantity,
            discount=command.discount,
            restock_date=command.restock_date,
        )
        current_domain.repository_for(Product).add(product)

    @handle(RemoveSupplierOffer)
    def remove_supplier_offer(self, command):
        product = load(Product, command.product_id)
        product.remove_offer(command.supplier_id)
        current_domain.repository_for(Product).add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        product = load(Product, command.product_id)
        if product.current_flash_sale_id:
            raise ConflictError(
                "Product is part of a flash sale",
                {"flash_sale_id": str(product.current_flash_sale_id)},
            )
        current_domain.repository_for(Product)._dao.delete(product)
        logger.info("Product deleted", product_id=str(command.product_id))
