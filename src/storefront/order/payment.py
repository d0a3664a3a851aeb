"""Order payment leg: commands and handler.

These commands only record outcomes on the order. Talking to the gateway and
checking callback signatures happens in ``storefront.payments.reconciliation``.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class AttachPaymentIntent:
    order_id = Identifier(required=True)
    gateway_order_id = String(required=True, max_length=255)


@storefront.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    gateway_payment_id = String(required=True, max_length=255)
    amount_paid = Float()
    payment_method = String(max_length=50)


@storefront.command(part_of="Order")
class RecordPaymentFailure:
    order_id = Identifier(required=True)
    gateway_payment_id = String(max_length=255)
    reason = String(max_length=500)


@storefront.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(AttachPaymentIntent)
    def attach_payment_intent(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        order.attach_payment_intent(command.gateway_order_id)
        repo.add(order)

    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        applied = order.confirm_payment(
            gateway_payment_id=command.gateway_payment_id,
            amount_paid=command.amount_paid,
            payment_method=command.payment_method,
        )
        if applied:
            repo.add(order)
        return applied

    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        recorded = order.fail_payment(gateway_payment_id=command.gateway_payment_id, reason=command.reason)
        if recorded:
            repo.add(order)
        return recorded
