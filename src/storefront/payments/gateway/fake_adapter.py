"""Configurable fake payment gateway for development and testing.

No external calls are made. The gateway can be told to fail, in which case it
raises ``GatewayError`` the way a real adapter does on an outage.
"""

from uuid import uuid4

from storefront.errors import GatewayError
from storefront.payments.gateway.port import PaymentDetails, PaymentGateway, PaymentIntent
from storefront.pricing import to_minor_units


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway timed out"
        self.calls: list[dict] = []
        self.payments: dict[str, PaymentDetails] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway timed out") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def record_payment(
        self,
        payment_id: str,
        gateway_order_id: str,
        amount: float | None = None,
        method: str = "card",
        status: str = "captured",
    ) -> None:
        """Pretend a customer paid, so ``fetch_payment`` can report it."""
        self.payments[payment_id] = PaymentDetails(
            payment_id=payment_id,
            gateway_order_id=gateway_order_id,
            status=status,
            method=method,
            amount=amount,
        )

    def create_intent(self, amount: float, currency: str, receipt: str) -> PaymentIntent:
        self.calls.append({"method": "create_intent", "amount": amount, "currency": currency, "receipt": receipt})

        if not self.should_succeed:
            raise GatewayError(self.failure_reason, retryable=True)
        return PaymentIntent(
            intent_id=f"order_fake{uuid4().hex[:14]}",
            amount=amount,
            currency=currency,
            receipt=receipt,
            amount_minor=to_minor_units(amount),
        )

    def fetch_payment(self, payment_id: str) -> PaymentDetails:
        self.calls.append({"method": "fetch_payment", "payment_id": payment_id})

        if not self.should_succeed:
            raise GatewayError(self.failure_reason, retryable=True)
        if payment_id in self.payments:
            return self.payments[payment_id]
        return PaymentDetails(payment_id=payment_id, gateway_order_id=None, status="captured", method="card")
