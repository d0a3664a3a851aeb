"""Payment reconciliation: mint gateway intents and apply verified callbacks.

The caller's claim that a payment succeeded is never trusted. A callback is
applied only when its signature matches the one computed here from the
gateway order id and payment id with the server-held secret.
"""

import os
import time

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.errors import Forbidden, GatewayError, VerificationFailed
from storefront.identity.principal import Principal
from storefront.notifications import notify_safely
from storefront.notifications.port import NotificationKind
from storefront.order.order import Order, PaymentStatus
from storefront.order.payment import AttachPaymentIntent, ConfirmPayment, RecordPaymentFailure
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.port import PaymentIntent
from storefront.payments.signature import signature_matches
from storefront.utils.locks import order_locks

logger = structlog.get_logger(__name__)


def default_currency() -> str:
    return os.environ.get("PAYMENT_CURRENCY", "INR")


def create_payment_intent(
    principal: Principal,
    amount: float | None = None,
    order_id: str | None = None,
) -> PaymentIntent:
    """Mint a fresh gateway intent.

    For an existing order the intent covers the order total and its id is
    stored on the order, replacing any earlier unpaid intent. Otherwise an
    explicit positive amount is required.
    """
    gateway = get_gateway()

    if order_id is None:
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than zero"]})
        return gateway.create_intent(amount, default_currency(), receipt=f"receipt_{int(time.time() * 1000)}")

    with order_locks.hold(order_id):
        order = current_domain.repository_for(Order).find(order_id)
        if not principal.can_act_for(order.customer_id):
            raise Forbidden("Not allowed to pay for this order")
        order.ensure_payable()

        intent = gateway.create_intent(
            order.total_amount,
            order.currency or default_currency(),
            receipt=f"receipt_{order.order_number}",
        )
        current_domain.process(
            AttachPaymentIntent(order_id=str(order.id), gateway_order_id=intent.intent_id),
            asynchronous=False,
        )

    logger.info("Payment intent created", order_id=str(order_id), intent_id=intent.intent_id)
    return intent


def _payment_method(gateway_payment_id: str) -> str | None:
    """Best-effort lookup of how the customer paid; the payment is already verified."""
    try:
        return get_gateway().fetch_payment(gateway_payment_id).method
    except GatewayError as exc:
        logger.warning(
            "Could not fetch payment details",
            gateway_payment_id=gateway_payment_id,
            error=exc.message,
        )
        return None


def verify_and_apply(gateway_order_id: str, gateway_payment_id: str, signature: str) -> Order:
    """Apply a gateway callback to the order it belongs to.

    Raises ``OrderNotFound`` for an unknown gateway order id and
    ``VerificationFailed`` on a signature mismatch, after marking the payment
    leg failed (a completed payment is left untouched). Re-applying an
    already confirmed payment changes nothing.
    """
    repo = current_domain.repository_for(Order)
    order = repo.find_by_gateway_order_id(gateway_order_id)
    order_id = str(order.id)

    with order_locks.hold(order_id):
        order = repo.find(order_id)

        if not signature_matches(gateway_order_id, gateway_payment_id, signature):
            current_domain.process(
                RecordPaymentFailure(
                    order_id=order_id,
                    gateway_payment_id=gateway_payment_id,
                    reason="Signature verification failed",
                ),
                asynchronous=False,
            )
            logger.warning(
                "Payment signature mismatch",
                order_id=order_id,
                gateway_order_id=gateway_order_id,
                gateway_payment_id=gateway_payment_id,
            )
            raise VerificationFailed("Payment verification failed")

        if order.payment_status == PaymentStatus.COMPLETED.value and order.gateway_payment_id == gateway_payment_id:
            logger.info("Payment already applied", order_id=order_id, gateway_payment_id=gateway_payment_id)
            return order

        applied = current_domain.process(
            ConfirmPayment(
                order_id=order_id,
                gateway_payment_id=gateway_payment_id,
                amount_paid=order.total_amount,
                payment_method=_payment_method(gateway_payment_id),
            ),
            asynchronous=False,
        )
        order = repo.find(order_id)

    if applied:
        logger.info("Payment confirmed", order_id=order_id, gateway_payment_id=gateway_payment_id)
        notify_safely(
            NotificationKind.ORDER_CONFIRMATION,
            order.customer_id,
            order_id=order_id,
            order_number=order.order_number,
            amount_paid=order.amount_paid,
        )
    return order
