"""Order aggregate: the immutable record of a purchase.

An order is created once per checkout. Its lines, prices and total are frozen
at that moment; afterwards only the payment leg, the status, delivery details
and the append-only status history may change.

Status machine:
    pending → processing → shipped → delivered
    pending | processing | shipped → cancelled
    delivered and cancelled are terminal.

Every accepted transition appends a history entry in the same change as the
status itself, so the last history entry always names the current status.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import InvalidStatusTransition
from storefront.order.events import (
    DeliveryInfoUpdated,
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    PaymentConfirmed,
    PaymentFailed,
    PaymentIntentAttached,
)
from storefront.pricing import amounts_match, basket_total, line_total


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

CANCELLABLE_STATES = {s for s, targets in TRANSITIONS.items() if OrderStatus.CANCELLED in targets}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS.get(current, set())


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout and never updated."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line. ``unit_price`` is the catalogue price at checkout."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)


@storefront.entity(part_of="Order")
class StatusEntry:
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)
    timestamp = DateTime(required=True)
    sequence = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total_amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="INR")
    shipping_address = ValueObject(ShippingAddress)

    # Payment leg
    gateway_order_id = String(max_length=255)
    gateway_payment_id = String(max_length=255)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(max_length=50)
    amount_paid = Float(default=0.0)

    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusEntry)

    # Delivery
    tracking_number = String(max_length=255)
    courier = String(max_length=100)
    estimated_delivery = DateTime()

    cancelled_by = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_equal_sum_of_lines(self):
        if not amounts_match(self.total_amount, basket_total(self.items)):
            raise ValidationError({"total_amount": ["Order total must equal the sum of its line totals"]})

    @invariant.post
    def history_must_end_with_current_status(self):
        latest = self.latest_status_entry()
        if latest is None or latest.status != self.status:
            raise ValidationError({"status_history": ["Last history entry must match the current status"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, lines, shipping_address, currency="INR"):
        """Create a pending order from priced lines.

        Args:
            customer_id: The owner of the order.
            lines: List of dicts with product_id, quantity, size, unit_price.
            shipping_address: Dict with street, city, state, zip_code, country.
            currency: ISO currency of the prices.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=line["product_id"],
                quantity=line["quantity"],
                size=line.get("size"),
                unit_price=line["unit_price"],
                line_total=line_total(line["unit_price"], line["quantity"]),
            )
            for line in lines
        ]
        address = ShippingAddress(
            street=shipping_address.get("street"),
            city=shipping_address.get("city"),
            state=shipping_address.get("state"),
            zip_code=shipping_address.get("zip_code"),
            country=shipping_address.get("country"),
        )

        order = cls(
            customer_id=str(customer_id),
            items=items,
            total_amount=basket_total(items),
            currency=currency,
            shipping_address=address,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
            status_history=[
                StatusEntry(
                    status=OrderStatus.PENDING.value,
                    note="Order placed",
                    timestamp=now,
                    sequence=1,
                )
            ],
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_id=str(customer_id),
                items=json.dumps(order.lines()),
                total_amount=order.total_amount,
                currency=currency,
                shipping_address=json.dumps(shipping_address),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def order_number(self):
        return f"ORD{str(self.id)[-6:].upper()}"

    def refund_amount(self):
        """Amount owed back to the customer when a paid order is cancelled."""
        return self.total_amount

    def lines(self):
        return [
            {
                "product_id": str(item.product_id),
                "quantity": item.quantity,
                "size": item.size,
                "unit_price": item.unit_price,
                "line_total": item.line_total,
            }
            for item in self.items
        ]

    def reserved_quantities(self):
        """(product_id, quantity) pairs that were reserved when the order was placed."""
        return [(str(item.product_id), item.quantity) for item in self.items]

    def history(self):
        return sorted(self.status_history or [], key=lambda entry: entry.sequence)

    def latest_status_entry(self):
        entries = self.history()
        return entries[-1] if entries else None

    def is_owned_by(self, customer_id):
        return str(self.customer_id) == str(customer_id)

    # -------------------------------------------------------------------
    # Status machine
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target):
        current = OrderStatus(self.status)
        if not can_transition(current, target):
            raise InvalidStatusTransition({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def _record_status(self, target, note, now):
        """Set the status and append its history entry. Callers hold ``atomic_change``."""
        latest = self.latest_status_entry()
        self.status = target.value
        self.add_status_history(
            StatusEntry(
                status=target.value,
                note=note,
                timestamp=now,
                sequence=(latest.sequence if latest else 0) + 1,
            )
        )
        self.updated_at = now

    def transition_to(self, target, note=None):
        """Move to ``target`` if the transition table allows it."""
        target = OrderStatus(target)
        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        with atomic_change(self):
            self._record_status(target, note, now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                note=note,
                changed_at=now,
            )
        )

    def cancel(self, cancelled_by, reason=None):
        """Cancel the order; a completed payment is flagged refunded.

        Returns the (product_id, quantity) pairs whose stock must be released.
        """
        current = OrderStatus(self.status)
        if current not in CANCELLABLE_STATES:
            raise InvalidStatusTransition(
                {"status": [f"Cannot cancel order in {current.value} state"]}
            )

        refunded = self.payment_status == PaymentStatus.COMPLETED.value
        now = datetime.now(UTC)
        with atomic_change(self):
            self._record_status(OrderStatus.CANCELLED, reason or "Order cancelled", now)
            self.cancelled_by = cancelled_by
            if refunded:
                self.payment_status = PaymentStatus.REFUNDED.value

        released = self.reserved_quantities()
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                cancelled_by=cancelled_by,
                reason=reason,
                items=json.dumps([{"product_id": p, "quantity": q} for p, q in released]),
                payment_refunded=refunded,
                refund_amount=self.refund_amount() if refunded else 0.0,
                cancelled_at=now,
            )
        )
        return released

    # -------------------------------------------------------------------
    # Payment leg
    # -------------------------------------------------------------------
    def ensure_payable(self):
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise InvalidStatusTransition({"status": ["Cannot take payment for a cancelled order"]})
        if self.payment_status in (PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value):
            raise ValidationError({"payment_status": ["Order has already been paid"]})

    def attach_payment_intent(self, gateway_order_id):
        """Link a freshly minted gateway intent. Replaces an unpaid earlier intent."""
        self.ensure_payable()

        self.gateway_order_id = gateway_order_id
        self.payment_status = PaymentStatus.PENDING.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentIntentAttached(
                order_id=str(self.id),
                gateway_order_id=gateway_order_id,
                amount=self.total_amount,
            )
        )

    def confirm_payment(self, gateway_payment_id, amount_paid=None, payment_method=None):
        """Apply a verified payment.

        Returns False when this exact payment was already applied, True otherwise.
        A pending order moves to processing in the same change.
        """
        if self.payment_status == PaymentStatus.COMPLETED.value:
            if self.gateway_payment_id == gateway_payment_id:
                return False
            raise ValidationError({"payment_status": ["Order has already been paid"]})
        if self.payment_status == PaymentStatus.REFUNDED.value or OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise InvalidStatusTransition({"status": ["Cannot apply a payment to a cancelled order"]})

        amount = amount_paid if amount_paid is not None else self.total_amount
        now = datetime.now(UTC)
        advance = OrderStatus(self.status) == OrderStatus.PENDING
        previous = self.status

        with atomic_change(self):
            self.payment_status = PaymentStatus.COMPLETED.value
            self.gateway_payment_id = gateway_payment_id
            self.amount_paid = amount
            if payment_method:
                self.payment_method = payment_method
            if advance:
                self._record_status(OrderStatus.PROCESSING, "Payment confirmed", now)
            else:
                self.updated_at = now

        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                gateway_order_id=self.gateway_order_id,
                gateway_payment_id=gateway_payment_id,
                amount_paid=amount,
                payment_method=self.payment_method,
                confirmed_at=now,
            )
        )
        if advance:
            self.raise_(
                OrderStatusChanged(
                    order_id=str(self.id),
                    previous_status=previous,
                    new_status=OrderStatus.PROCESSING.value,
                    note="Payment confirmed",
                    changed_at=now,
                )
            )
        return True

    def fail_payment(self, gateway_payment_id=None, reason=None):
        """Mark the payment leg failed; the order itself stays as it is.

        Returns False, changing nothing, once a payment has been completed.
        """
        if self.payment_status in (PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value):
            return False

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.FAILED.value
        self.updated_at = now

        self.raise_(
            PaymentFailed(
                order_id=str(self.id),
                gateway_order_id=self.gateway_order_id,
                gateway_payment_id=gateway_payment_id,
                reason=reason,
                failed_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def update_delivery(self, tracking_number=None, courier=None, estimated_delivery=None):
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise InvalidStatusTransition({"status": ["Cannot update delivery of a cancelled order"]})

        if tracking_number is not None:
            self.tracking_number = tracking_number
        if courier is not None:
            self.courier = courier
        if estimated_delivery is not None:
            self.estimated_delivery = estimated_delivery
        self.updated_at = datetime.now(UTC)

        self.raise_(
            DeliveryInfoUpdated(
                order_id=str(self.id),
                tracking_number=self.tracking_number,
                courier=self.courier,
                estimated_delivery=self.estimated_delivery,
            )
        )
