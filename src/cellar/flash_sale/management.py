"""Flash sale commands and the product back-reference bookkeeping.

Creating a sale links every listed product to it; updating releases the
products that were dropped and links the new ones; deleting releases all.
A product already tied to a different sale that has not ended yet cannot be
linked (conflicts are only checked for newly added products on update).
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from cellar.catalogue.product.product import Product
from cellar.domain import cellar
from cellar.errors import ConflictError, InvalidError
from cellar.flash_sale.flash_sale import FlashSale, resolve_special_price
from cellar.shared.lookup import load

logger = structlog.get_logger(__name__)


@cellar.command(part_of="FlashSale")
class CreateFlashSale:
    title = String(required=True, max_length=200)
    description = Text(required=True)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    discount_percentage = Float(required=True, min_value=0.0, max_value=100.0)
    products = Text(required=True)  # JSON: list of {product_id, special_price?}
    is_active = Boolean(default=False)
    max_purchase_quantity = Integer()
    min_purchase_amount = Float(default=0.0)
    total_stock = Integer()


@cellar.command(part_of="FlashSale")
class UpdateFlashSale:
    flash_sale_id = Identifier(required=True)
    title = String(max_length=200)
    description = Text()
    start_date = DateTime()
    end_date = DateTime()
    discount_percentage = Float(min_value=0.0, max_value=100.0)
    products = Text()  # JSON, replaces the whole list when present
    is_active = Boolean()
    max_purchase_quantity = Integer()
    min_purchase_amount = Float()
    total_stock = Integer()


@cellar.command(part_of="FlashSale")
class DeleteFlashSale:
    flash_sale_id = Identifier(required=True)


def _linked_sale_blocks(product, sale_id):
    """True when the product is tied to another sale that has not ended."""
    linked_id = product.current_flash_sale_id
    if not linked_id or str(linked_id) == str(sale_id):
        return False
    try:
        linked = current_domain.repository_for(FlashSale).get(str(linked_id))
    except ObjectNotFoundError:
        return False
    return not linked.has_ended()


def _resolve_products(raw_products, discount_percentage, sale_id=None, check_conflicts_for=None):
    """Load the listed products and work out each special price.

    Returns (entries, products_by_id). Conflicts are checked for every product
    whose id is in ``check_conflicts_for`` (all of them when it is None).
    """
    entries = json.loads(raw_products) if isinstance(raw_products, str) else raw_products
    if not entries:
        raise InvalidError("A flash sale needs at least one product")

    resolved = []
    products = {}
    conflicts = []
    for entry in entries:
        product = load(Product, entry.get("product_id"))
        product_id = str(product.id)
        if product_id in products:
            raise InvalidError("Product listed twice in flash sale", {"product_id": product_id})

        if (check_conflicts_for is None or product_id in check_conflicts_for) and _linked_sale_blocks(
            product, sale_id
        ):
            conflicts.append(product_id)

        products[product_id] = product
        resolved.append(
            {
                "product_id": product_id,
                "special_price": resolve_special_price(
                    entry.get("special_price"), product.default_price, discount_percentage
                ),
            }
        )

    if conflicts:
        raise ConflictError("Products already belong to another active flash sale", {"product_ids": conflicts})

    return resolved, products


@cellar.command_handler(part_of=FlashSale)
class ManageFlashSaleHandler:
    @handle(CreateFlashSale)
    def create_flash_sale(self, command):
        entries, products = _resolve_products(command.products, command.discount_percentage)

        sale = FlashSale.create(
            title=command.title,
            description=command.description,
            start_date=command.start_date,
            end_date=command.end_date,
            discount_percentage=command.discount_percentage,
            products=entries,
            is_active=command.is_active,
            max_purchase_quantity=command.max_purchase_quantity,
            min_purchase_amount=command.min_purchase_amount,
            total_stock=command.total_stock,
        )

        product_repo = current_domain.repository_for(Product)
        for entry in entries:
            product = products[entry["product_id"]]
            product.link_flash_sale(str(sale.id), entry["special_price"])
            product_repo.add(product)

        current_domain.repository_for(FlashSale).add(sale)
        logger.info("Flash sale created", flash_sale_id=str(sale.id), products=len(entries))
        return str(sale.id)

    @handle(UpdateFlashSale)
    def update_flash_sale(self, command):
        sale = load(FlashSale, command.flash_sale_id, "Flash sale")
        product_repo = current_domain.repository_for(Product)

        sale.update_details(
            title=command.title,
            description=command.description,
            start_date=command.start_date,
            end_date=command.end_date,
            discount_percentage=command.discount_percentage,
            is_active=command.is_active,
            max_purchase_quantity=command.max_purchase_quantity,
            min_purchase_amount=command.min_purchase_amount,
            total_stock=command.total_stock,
        )

        if command.products is not None:
            incoming = json.loads(command.products)
            new_ids = {str(entry.get("product_id")) for entry in incoming} - sale.product_ids()
            entries, products = _resolve_products(
                incoming,
                sale.discount_percentage,
                sale_id=sale.id,
                check_conflicts_for=new_ids,
            )
            added, removed = sale.replace_products(entries)

            for product_id in removed:
                try:
                    product = product_repo.get(product_id)
                except ObjectNotFoundError:
                    continue
                product.release_flash_sale(str(sale.id))
                product_repo.add(product)

            # Every listed product is (re-)linked so special price edits reach the product
            for entry in entries:
                product = products[entry["product_id"]]
                product.link_flash_sale(str(sale.id), entry["special_price"])
                product_repo.add(product)

            logger.info(
                "Flash sale products replaced",
                flash_sale_id=str(sale.id),
                added=sorted(added),
                removed=sorted(removed),
            )

        current_domain.repository_for(FlashSale).add(sale)

    @handle(DeleteFlashSale)
    def delete_flash_sale(self, command):
        sale = load(FlashSale, command.flash_sale_id, "Flash sale")
        product_repo = current_domain.repository_for(Product)

        for product_id in sale.product_ids():
            try:
                product = product_repo.get(product_id)
            except ObjectNotFoundError:
                continue
            product.release_flash_sale(str(sale.id))
            product_repo.add(product)

        current_domain.repository_for(FlashSale)._dao.delete(sale)
        logger.info("Flash sale deleted", flash_sale_id=str(command.flash_sale_id))
