"""Shipment address commands, handler and read helpers."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from cellar.domain import cellar
from cellar.shared.lookup import find_all, load
from cellar.shipment.shipment import Shipment
from cellar.shipment.shipping import ShippingMethod

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Shipment")
class CreateShipment:
    user_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    address = String(required=True, max_length=255)
    apartment = String(max_length=100)
    company = String(max_length=150)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    country = String(required=True, max_length=100)
    zip = String(required=True, max_length=20)
    phone = String(required=True, max_length=30)
    email = String(required=True, max_length=254)
    note = String(max_length=255)
    is_default = Boolean()
    shipping_method = String(choices=ShippingMethod)


@cellar.command(part_of="Shipment")
class UpdateShipment:
    user_id = Identifier(required=True)
    shipment_id = Identifier(required=True)
    name = String(max_length=150)
    address = String(max_length=255)
    apartment = String(max_length=100)
    company = String(max_length=150)
    city = String(max_length=100)
    state = String(max_length=100)
    country = String(max_length=100)
    zip = String(max_length=20)
    phone = String(max_length=30)
    email = String(max_length=254)
    note = String(max_length=255)
    shipping_method = String(choices=ShippingMethod)


@cellar.command(part_of="Shipment")
class DeleteShipment:
    user_id = Identifier(required=True)
    shipment_id = Identifier(required=True)


@cellar.command(part_of="Shipment")
class SetDefaultShipment:
    user_id = Identifier(required=True)
    shipment_id = Identifier(required=True)


_ADDRESS_FIELDS = (
    "name",
    "address",
    "apartment",
    "company",
    "city",
    "state",
    "country",
    "zip",
    "phone",
    "email",
    "note",
)


def addresses_of(user_id) -> list:
    """A user's addresses, default first, then most recently updated."""
    addresses = find_all(Shipment, user_id=str(user_id))
    addresses.sort(key=lambda s: s.updated_at, reverse=True)
    addresses.sort(key=lambda s: not s.is_default)
    return addresses


def default_address_of(user_id):
    addresses = addresses_of(user_id)
    return addresses[0] if addresses else None


@cellar.command_handler(part_of=Shipment)
class ManageShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        existing = addresses_of(command.user_id)

        # The first address a user saves is their default
        make_default = command.is_default if command.is_default is not None else not existing
        if make_default:
            for other in existing:
                if other.is_default:
                    other.unmark_default()
                    repo.add(other)

        shipment = Shipment.create(
            user_id=command.user_id,
            is_default=make_default or not existing,
            shipping_method=command.shipping_method,
            **{field: getattr(command, field) for field in _ADDRESS_FIELDS},
        )
        repo.add(shipment)
        logger.info("Shipment address created", user_id=str(command.user_id), shipment_id=str(shipment.id))
        return str(shipment.id)

    @handle(UpdateShipment)
    def update_shipment(self, command):
        shipment = load(Shipment, command.shipment_id, "Shipment details")
        shipment.ensure_owned_by(command.user_id)
        shipment.update(
            shipping_method=command.shipping_method,
            **{field: getattr(command, field) for field in _ADDRESS_FIELDS},
        )
        current_domain.repository_for(Shipment).add(shipment)

    @handle(DeleteShipment)
    def delete_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = load(Shipment, command.shipment_id, "Shipment details")
        shipment.ensure_owned_by(command.user_id)
        repo._dao.delete(shipment)

        if shipment.is_default:
            successor = default_address_of(command.user_id)
            if successor is not None:
                successor.mark_default()
                repo.add(successor)
        logger.info("Shipment address deleted", user_id=str(command.user_id), shipment_id=str(shipment.id))

    @handle(SetDefaultShipment)
    def set_default(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = load(Shipment, command.shipment_id, "Address")
        shipment.ensure_owned_by(command.user_id)

        for other in addresses_of(command.user_id):
            if other.is_default and str(other.id) != str(shipment.id):
                other.unmark_default()
                repo.add(other)

        shipment.mark_default()
        repo.add(shipment)
