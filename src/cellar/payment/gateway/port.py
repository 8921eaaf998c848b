"""Payment gateway port.

Order payment capture talks to this interface only; a production adapter
(Stripe) is installed with ``set_gateway()`` in place of the fake one.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentIntentResult:
    """Outcome of asking the gateway for a payment intent."""

    success: bool
    client_secret: str | None = None
    intent_id: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def create_payment_intent(
        self,
        amount_minor: int,
        currency: str,
        description: str | None,
    ) -> PaymentIntentResult:
        """Create a payment intent for ``amount_minor`` (cents) in ``currency``."""
        ...
