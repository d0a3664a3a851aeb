"""Tests for Order placement, derived values and invariants."""

import pytest
from protean import atomic_change
from protean.exceptions import ValidationError
from storefront.order.events import OrderPlaced
from storefront.order.order import Order, OrderStatus, PaymentStatus

ADDRESS = {"street": "12 MG Road", "city": "Bengaluru", "state": "KA", "zip_code": "560001", "country": "IN"}


def place(lines=None, **overrides):
    defaults = {
        "customer_id": "cust-001",
        "lines": lines
        or [
            {"product_id": "prod-001", "quantity": 2, "size": "M", "unit_price": 100.0},
            {"product_id": "prod-002", "quantity": 1, "unit_price": 49.5},
        ],
        "shipping_address": ADDRESS,
    }
    defaults.update(overrides)
    return Order.place(**defaults)


class TestPlaceOrder:
    def test_new_order_is_pending(self):
        order = place()
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.currency == "INR"

    def test_lines_and_total(self):
        order = place()
        assert [item.line_total for item in order.items] == [200.0, 49.5]
        assert order.total_amount == 249.5

    def test_initial_history_entry(self):
        order = place()
        history = order.history()
        assert len(history) == 1
        assert history[0].status == "pending"
        assert history[0].note == "Order placed"

    def test_shipping_address_captured(self):
        order = place()
        assert order.shipping_address.city == "Bengaluru"
        assert order.shipping_address.zip_code == "560001"

    def test_address_requires_street(self):
        with pytest.raises(ValidationError):
            place(shipping_address={**ADDRESS, "street": None})

    def test_needs_items(self):
        with pytest.raises(ValidationError) as exc:
            Order.place(customer_id="cust-001", lines=[], shipping_address=ADDRESS)
        assert "items" in exc.value.messages

    def test_raises_order_placed(self):
        order = place()
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.order_id == str(order.id)
        assert event.total_amount == 249.5


class TestDerivedValues:
    def test_order_number(self):
        order = place()
        assert order.order_number == f"ORD{str(order.id)[-6:].upper()}"
        assert len(order.order_number) == 9

    def test_refund_amount_is_total(self):
        assert place().refund_amount() == 249.5

    def test_reserved_quantities(self):
        assert place().reserved_quantities() == [("prod-001", 2), ("prod-002", 1)]

    def test_ownership(self):
        order = place()
        assert order.is_owned_by("cust-001")
        assert not order.is_owned_by("cust-002")


class TestInvariants:
    def test_total_must_match_lines(self):
        order = place()
        with pytest.raises(ValidationError) as exc:
            with atomic_change(order):
                order.total_amount = 1.0
        assert "total_amount" in exc.value.messages

    def test_status_cannot_change_without_history(self):
        order = place()
        with pytest.raises(ValidationError) as exc:
            with atomic_change(order):
                order.status = OrderStatus.PROCESSING.value
        assert "status_history" in exc.value.messages
