"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A checkout produced an order with reserved stock and frozen prices."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line dicts
    total_amount = Float(required=True)
    currency = String(max_length=3)
    shipping_address = Text()  # JSON: address dict
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    note = String(max_length=500)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentIntentAttached:
    __version__ = 1

    order_id = Identifier(required=True)
    gateway_order_id = String(required=True, max_length=255)
    amount = Float(required=True)


@storefront.event(part_of="Order")
class PaymentConfirmed:
    """The gateway callback was verified and the payment applied to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    gateway_order_id = String(max_length=255)
    gateway_payment_id = String(required=True, max_length=255)
    amount_paid = Float(required=True)
    payment_method = String(max_length=50)
    confirmed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentFailed:
    __version__ = 1

    order_id = Identifier(required=True)
    gateway_order_id = String(max_length=255)
    gateway_payment_id = String(max_length=255)
    reason = String(max_length=500)
    failed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    cancelled_by = String(required=True, max_length=50)
    reason = String(max_length=500)
    items = Text(required=True)  # JSON: product_id/quantity pairs to release
    payment_refunded = Boolean(default=False)
    refund_amount = Float(default=0.0)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class DeliveryInfoUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(max_length=255)
    courier = String(max_length=100)
    estimated_delivery = DateTime()
