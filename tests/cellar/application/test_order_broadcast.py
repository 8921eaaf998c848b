"""Order changes are pushed to real-time listeners."""

from cellar.broadcast import get_broadcaster
from cellar.order.creation import CreateOrder
from cellar.order.order import Order
from cellar.order.status import UpdateOrderStatus
from protean import current_domain


def _place_order(make_product, make_address, add_to_cart):
    make_address()
    add_to_cart(make_product(price=20.0))
    return current_domain.process(CreateOrder(user_id="user-001"), asynchronous=False)


def test_order_created_is_broadcast(make_product, make_address, add_to_cart):
    order_id = _place_order(make_product, make_address, add_to_cart)

    payloads = get_broadcaster().events_named("order-created")
    assert [p["id"] for p in payloads] == [order_id]
    assert payloads[0]["status"] == "pending"
    assert payloads[0]["items"][0]["quantity"] == 1


def test_status_change_is_broadcast(make_product, make_address, add_to_cart):
    order_id = _place_order(make_product, make_address, add_to_cart)
    current_domain.process(UpdateOrderStatus(order_id=order_id, status="shipped"), asynchronous=False)

    payloads = get_broadcaster().events_named("order-updated")
    assert payloads[-1]["id"] == order_id
    assert payloads[-1]["status"] == "shipped"


def test_broadcast_failure_does_not_undo_the_order(make_product, make_address, add_to_cart):
    get_broadcaster().configure(should_fail=True)
    order_id = _place_order(make_product, make_address, add_to_cart)

    assert current_domain.repository_for(Order).get(order_id).status == "pending"
    assert get_broadcaster().emitted == []
