"""Cancellation, admin status changes and delivery details."""

from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from storefront.errors import Forbidden, InvalidStatusTransition, OrderNotFound
from storefront.notifications.port import NotificationKind
from storefront.order.checkout import checkout
from storefront.order.lifecycle import cancel_order, update_delivery, update_status
from storefront.order.order import Order
from storefront.order.payment import ConfirmPayment
from storefront.utils.locks import order_locks


@pytest.fixture()
def placed(customer, address, product):
    """An order for 4 units of a product with 10 in stock."""
    product("prod-001", price=100.0, stock=10)
    return checkout(customer, address, items=[{"product_id": "prod-001", "quantity": 4}])


def pay(order_id, payment_id="pay_001"):
    current_domain.process(ConfirmPayment(order_id=order_id, gateway_payment_id=payment_id), asynchronous=False)


class TestCancelOrder:
    def test_cancel_restores_stock(self, placed, customer, ledger):
        assert ledger.available("prod-001") == 6

        order = cancel_order(customer, placed, reason="Ordered by mistake")

        assert order.status == "cancelled"
        assert order.cancelled_by == "customer"
        assert order.latest_status_entry().note == "Ordered by mistake"
        assert ledger.available("prod-001") == 10

    def test_second_cancel_is_rejected_and_stock_unchanged(self, placed, customer, ledger):
        cancel_order(customer, placed)

        with pytest.raises(InvalidStatusTransition):
            cancel_order(customer, placed)

        assert ledger.available("prod-001") == 10

    def test_paid_processing_order_is_refunded(self, placed, customer, ledger):
        pay(placed)
        assert current_domain.repository_for(Order).find(placed).status == "processing"

        order = cancel_order(customer, placed)

        assert order.status == "cancelled"
        assert order.payment_status == "refunded"
        assert ledger.available("prod-001") == 10

    def test_shipped_order_can_be_cancelled(self, placed, admin, ledger):
        update_status(admin, placed, "processing")
        update_status(admin, placed, "shipped")

        order = cancel_order(admin, placed)

        assert order.status == "cancelled"
        assert order.cancelled_by == "admin"
        assert ledger.available("prod-001") == 10

    def test_delivered_order_cannot_be_cancelled(self, placed, admin, ledger):
        for status in ("processing", "shipped", "delivered"):
            update_status(admin, placed, status)

        with pytest.raises(InvalidStatusTransition):
            cancel_order(admin, placed)

        assert current_domain.repository_for(Order).find(placed).status == "delivered"
        assert ledger.available("prod-001") == 6

    def test_other_customer_is_forbidden(self, placed, other_customer, ledger):
        with pytest.raises(Forbidden):
            cancel_order(other_customer, placed)

        assert current_domain.repository_for(Order).find(placed).status == "pending"
        assert ledger.available("prod-001") == 6

    def test_unknown_order(self, customer):
        with pytest.raises(OrderNotFound):
            cancel_order(customer, "no-such-order")

    def test_cancellation_notification(self, placed, customer, notifier):
        pay(placed)
        cancel_order(customer, placed)

        sent = notifier.of_kind(NotificationKind.CANCELLATION)
        assert len(sent) == 1
        assert sent[0]["payload"]["refund_amount"] == 400.0

    def test_notification_failure_does_not_undo_cancel(self, placed, customer, notifier, ledger):
        notifier.configure(should_succeed=False)

        order = cancel_order(customer, placed)

        assert order.status == "cancelled"
        assert ledger.available("prod-001") == 10

    def test_lock_is_released_afterwards(self, placed, customer):
        cancel_order(customer, placed)
        assert len(order_locks) == 0


class TestUpdateStatus:
    def test_admin_advances_order(self, placed, admin, notifier):
        order = update_status(admin, placed, "processing", note="Packed")

        assert order.status == "processing"
        assert [e.status for e in order.history()] == ["pending", "processing"]
        sent = notifier.of_kind(NotificationKind.STATUS_UPDATE)
        assert sent[0]["payload"]["status"] == "processing"

    def test_skipping_a_state_is_rejected(self, placed, admin):
        with pytest.raises(InvalidStatusTransition):
            update_status(admin, placed, "shipped")

        order = current_domain.repository_for(Order).find(placed)
        assert order.status == "pending"
        assert len(order.history()) == 1

    def test_customer_cannot_change_status(self, placed, customer):
        with pytest.raises(Forbidden):
            update_status(customer, placed, "processing")

    def test_unknown_status(self, placed, admin):
        with pytest.raises(ValidationError) as exc:
            update_status(admin, placed, "teleported")
        assert "status" in exc.value.messages

    def test_cancelled_target_runs_full_cancellation(self, placed, admin, ledger):
        order = update_status(admin, placed, "cancelled", note="Fraud check failed")

        assert order.status == "cancelled"
        assert order.cancelled_by == "admin"
        assert ledger.available("prod-001") == 10


class TestUpdateDelivery:
    def test_admin_sets_tracking(self, placed, admin):
        eta = datetime(2026, 11, 1, tzinfo=UTC)

        order = update_delivery(admin, placed, tracking_number="TRK123", courier="BlueDart", estimated_delivery=eta)

        assert order.tracking_number == "TRK123"
        assert order.courier == "BlueDart"
        assert order.status == "pending"

    def test_customer_cannot_set_tracking(self, placed, customer):
        with pytest.raises(Forbidden):
            update_delivery(customer, placed, tracking_number="TRK123")
