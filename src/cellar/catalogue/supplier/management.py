"""Supplier management commands."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from cellar.catalogue.supplier.supplier import Supplier
from cellar.domain import cellar
from cellar.shared.lookup import load


@cellar.command(part_of="Supplier")
class CreateSupplier:
    name = String(required=True, max_length=200)
    contact = String(max_length=200)
    location = String(max_length=200)


@cellar.command(part_of="Supplier")
class UpdateSupplier:
    supplier_id = Identifier(required=True)
    name = String(max_length=200)
    contact = String(max_length=200)
    location = String(max_length=200)


@cellar.command(part_of="Supplier")
class DeleteSupplier:
    supplier_id = Identifier(required=True)


@cellar.command_handler(part_of=Supplier)
class ManageSupplierHandler:
    @handle(CreateSupplier)
    def create_supplier(self, command):
        supplier = Supplier.create(name=command.name, contact=command.contact, location=command.location)
        current_domain.repository_for(Supplier).add(supplier)
        return str(supplier.id)

    @handle(UpdateSupplier)
    def update_supplier(self, command):
        supplier = load(Supplier, command.supplier_id)
        supplier.update(name=command.name, contact=command.contact, location=command.location)
        current_domain.repository_for(Supplier).add(supplier)

    @handle(DeleteSupplier)
    def delete_supplier(self, command):
        supplier = load(Supplier, command.supplier_id)
        current_domain.repository_for(Supplier)._dao.delete(supplier)
