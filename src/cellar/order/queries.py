"""Order read helpers."""

from cellar.order.order import Order
from cellar.shared.clock import ensure_utc
from cellar.shared.lookup import find_all, load


def _newest_first(orders):
    return sorted(orders, key=lambda o: ensure_utc(o.created_at), reverse=True)


def orders_of(user_id) -> list:
    return _newest_first(find_all(Order, user_id=str(user_id)))


def order_for(user_id, order_id):
    order = load(Order, order_id)
    order.ensure_owned_by(user_id)
    return order


def all_orders(status=None) -> list:
    orders = find_all(Order, status=status) if status else find_all(Order)
    return _newest_first(orders)
