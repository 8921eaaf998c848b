"""Shipment address routes and the shipping calculator."""

from dataclasses import asdict

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from cellar.api.deps import current_user_id
from cellar.api.responses import ok, serialize
from cellar.api.schemas import ShipmentRequest, ShipmentUpdateRequest, ShippingQuoteRequest
from cellar.shared.lookup import load
from cellar.shipment.management import (
    CreateShipment,
    DeleteShipment,
    SetDefaultShipment,
    UpdateShipment,
    addresses_of,
)
from cellar.shipment.shipment import Shipment
from cellar.shipment.shipping import quote_shipping

shipment_router = APIRouter(prefix="/shipments", tags=["shipments"])


@shipment_router.get("")
async def get_addresses(user_id: str = Depends(current_user_id)) -> dict:
    return ok([serialize(s) for s in addresses_of(user_id)])


@shipment_router.post("", status_code=201)
async def create_address(body: ShipmentRequest, user_id: str = Depends(current_user_id)) -> dict:
    shipment_id = current_domain.process(CreateShipment(user_id=user_id, **body.model_dump()), asynchronous=False)
    return ok(serialize(load(Shipment, shipment_id)), message="Shipment details saved")


def _quote_body(quote) -> dict:
    data = asdict(quote)
    data["estimated_delivery_date"] = quote.estimated_delivery_date.isoformat()
    return data


@shipment_router.post("/calculate")
async def calculate_shipping(body: ShippingQuoteRequest) -> dict:
    quote = quote_shipping(body.shipping_method, body.weight, body.country)
    return ok(_quote_body(quote))


@shipment_router.put("/{shipment_id}")
async def update_address(shipment_id: str, body: ShipmentUpdateRequest, user_id: str = Depends(current_user_id)) -> dict:
    command = UpdateShipment(user_id=user_id, shipment_id=shipment_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(serialize(load(Shipment, shipment_id)))


@shipment_router.put("/{shipment_id}/default")
async def set_default_address(shipment_id: str, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(SetDefaultShipment(user_id=user_id, shipment_id=shipment_id), asynchronous=False)
    return ok(serialize(load(Shipment, shipment_id)), message="Default address updated")


@shipment_router.delete("/{shipment_id}")
async def delete_address(shipment_id: str, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(DeleteShipment(user_id=user_id, shipment_id=shipment_id), asynchronous=False)
    return ok(message="Shipment details deleted")
