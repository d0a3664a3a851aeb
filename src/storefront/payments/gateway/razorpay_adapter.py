"""Razorpay payment gateway adapter over its REST API.

Uses HTTP basic auth with the key id and secret. Amounts go over the wire in
the smallest currency unit. Connection failures, timeouts and 5xx responses
become retryable ``GatewayError``s; 4xx responses are not retryable.
"""

import requests
import structlog

from storefront.errors import GatewayError
from storefront.payments.gateway.port import PaymentDetails, PaymentGateway, PaymentIntent
from storefront.pricing import to_minor_units

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.razorpay.com/v1"


class RazorpayGateway(PaymentGateway):
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            logger.error("Payment gateway unreachable", url=url, error=str(exc))
            raise GatewayError(retryable=True) from exc

        if response.status_code >= 400:
            logger.error("Payment gateway rejected request", url=url, status_code=response.status_code)
            raise GatewayError(retryable=response.status_code >= 500)

        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(retryable=True) from exc

    def create_intent(self, amount: float, currency: str, receipt: str) -> PaymentIntent:
        amount_minor = to_minor_units(amount)
        data = self._request(
            "POST",
            "/orders",
            json={"amount": amount_minor, "currency": currency, "receipt": receipt},
        )
        return PaymentIntent(
            intent_id=data["id"],
            amount=amount,
            currency=data.get("currency", currency),
            receipt=data.get("receipt", receipt),
            amount_minor=data.get("amount", amount_minor),
            status=data.get("status", "created"),
        )

    def fetch_payment(self, payment_id: str) -> PaymentDetails:
        data = self._request("GET", f"/payments/{payment_id}")
        amount_minor = data.get("amount")
        return PaymentDetails(
            payment_id=data.get("id", payment_id),
            gateway_order_id=data.get("order_id"),
            status=data.get("status", "unknown"),
            method=data.get("method"),
            amount=amount_minor / 100 if amount_minor is not None else None,
        )
