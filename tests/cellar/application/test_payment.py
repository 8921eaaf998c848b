"""Payment capture through the gateway."""

import pytest
from cellar.errors import InvalidError, NotFoundError, PaymentError
from cellar.order.creation import CreateOrder
from cellar.order.order import Order, OrderStatus
from cellar.order.payment import CapturePayment
from cellar.payment.gateway import get_gateway
from protean import current_domain


@pytest.fixture
def order_id(make_product, make_address, add_to_cart):
    make_address()
    add_to_cart(make_product(price=20.0), quantity=1)
    return current_domain.process(CreateOrder(user_id="user-001"), asynchronous=False)


def _capture(order_id, user_id="user-001", **options):
    command = CapturePayment(order_id=order_id, user_id=user_id, payment_method="stripe", **options)
    return current_domain.process(command, asynchronous=False)


def test_successful_payment_marks_the_order_paid(order_id):
    result = _capture(order_id, description="Order for Ada")

    assert result["status"] == OrderStatus.PAID.value
    assert result["client_secret"]
    assert len(result["tracking_number"]) == 10

    order = current_domain.repository_for(Order).get(order_id)
    assert order.status == OrderStatus.PAID.value
    assert order.payment_method == "stripe"
    assert order.currency == "usd"


def test_amount_is_sent_in_cents(order_id):
    _capture(order_id)
    call = get_gateway().calls[-1]
    # 20.00 of wine plus 5.99 standard shipping
    assert call["amount_minor"] == 2599
    assert call["currency"] == "usd"


def test_declined_payment_leaves_order_pending(order_id):
    get_gateway().configure(False, "Insufficient funds")
    with pytest.raises(PaymentError, match="Insufficient funds"):
        _capture(order_id)

    order = current_domain.repository_for(Order).get(order_id)
    assert order.status == OrderStatus.PENDING.value
    assert order.tracking_number is None


def test_paid_order_cannot_be_paid_again(order_id):
    _capture(order_id)
    with pytest.raises(InvalidError):
        _capture(order_id)


def test_other_users_order_is_not_found(order_id):
    with pytest.raises(NotFoundError):
        _capture(order_id, user_id="user-002")
