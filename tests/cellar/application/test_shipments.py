"""Saved addresses and the default-address rule."""

import pytest
from cellar.errors import ForbiddenError
from cellar.shipment.management import DeleteShipment, SetDefaultShipment, UpdateShipment, addresses_of
from cellar.shipment.shipment import Shipment
from cellar.shipment.shipping import quote_shipping
from protean import current_domain


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _defaults(user_id="user-001"):
    return [str(s.id) for s in addresses_of(user_id) if s.is_default]


def test_first_address_becomes_default(make_address):
    shipment_id = make_address()
    assert _defaults() == [shipment_id]


def test_later_address_is_not_default_unless_asked(make_address):
    first = make_address()
    make_address(city="Sonoma")
    assert _defaults() == [first]


def test_new_default_replaces_the_old_one(make_address):
    make_address()
    second = make_address(city="Sonoma", is_default=True)
    assert _defaults() == [second]


def test_set_default(make_address):
    make_address()
    second = make_address(city="Sonoma")
    _process(SetDefaultShipment(user_id="user-001", shipment_id=second))
    assert _defaults() == [second]
    assert str(addresses_of("user-001")[0].id) == second


def test_deleting_the_default_promotes_another(make_address):
    first = make_address()
    second = make_address(city="Sonoma")
    _process(DeleteShipment(user_id="user-001", shipment_id=first))
    assert _defaults() == [second]


def test_delivery_cost_follows_the_country(make_address):
    shipment_id = make_address()
    assert current_domain.repository_for(Shipment).get(shipment_id).delivery_cost == 5.99

    _process(UpdateShipment(user_id="user-001", shipment_id=shipment_id, country="Canada"))
    updated = current_domain.repository_for(Shipment).get(shipment_id)
    assert updated.delivery_cost == quote_shipping("standard", 1, "Canada").shipping_cost
    assert updated.delivery_cost > 5.99


def test_only_the_owner_can_change_an_address(make_address):
    shipment_id = make_address()
    with pytest.raises(ForbiddenError):
        _process(UpdateShipment(user_id="user-002", shipment_id=shipment_id, city="Paris"))
