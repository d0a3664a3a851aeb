"""Payment gateway port (abstract interface).

The gateway mints payment intents and reports on captured payments. Adapters
raise ``GatewayError`` for every failure to reach or be understood by the
gateway, and must bound every call with a timeout.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentIntent:
    """A gateway-side record of an expected payment."""

    intent_id: str
    amount: float
    currency: str
    receipt: str
    amount_minor: int
    status: str = "created"


@dataclass(frozen=True)
class PaymentDetails:
    payment_id: str
    gateway_order_id: str | None
    status: str
    method: str | None = None
    amount: float | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def create_intent(self, amount: float, currency: str, receipt: str) -> PaymentIntent:
        """Mint a new payment intent. Each call creates a fresh one."""
        ...

    @abstractmethod
    def fetch_payment(self, payment_id: str) -> PaymentDetails:
        ...
