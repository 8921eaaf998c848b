"""Configurable fake payment gateway.

Never leaves the process. It can be told to succeed or decline at runtime
and records every call, which is what the order payment tests assert on.
"""

from uuid import uuid4

from cellar.payment.gateway.port import PaymentGateway, PaymentIntentResult


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_payment_intent(
        self,
        amount_minor: int,
        currency: str,
        description: str | None,
    ) -> PaymentIntentResult:
        self.calls.append(
            {
                "method": "create_payment_intent",
                "amount_minor": amount_minor,
                "currency": currency,
                "description": description,
            }
        )

        if self.should_succeed:
            intent_id = f"pi_fake_{uuid4().hex[:16]}"
            return PaymentIntentResult(
                success=True,
                intent_id=intent_id,
                client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            )
        return PaymentIntentResult(success=False, failure_reason=self.failure_reason)
