"""Payment gateway registry.

``get_gateway()`` returns the active adapter, a ``FakeGateway`` unless one
was installed with ``set_gateway()``.
"""

from cellar.payment.gateway.fake_adapter import FakeGateway
from cellar.payment.gateway.port import PaymentGateway, PaymentIntentResult

__all__ = ["FakeGateway", "PaymentGateway", "PaymentIntentResult", "get_gateway", "reset_gateway", "set_gateway"]

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
