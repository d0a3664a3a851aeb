"""Order lifecycle services: cancellation, admin status changes and delivery info.

Every write to an existing order runs inside that order's critical section
(``order_locks``), the same one payment verification uses, so a cancellation
and a payment confirmation for one order never interleave.
"""

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.errors import Forbidden
from storefront.identity.principal import Principal
from storefront.inventory import get_ledger
from storefront.inventory.reservations import release_all
from storefront.notifications import notify_safely
from storefront.notifications.port import NotificationKind
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.order.status import CancelOrder, UpdateDeliveryInfo, UpdateOrderStatus
from storefront.utils.locks import order_locks

logger = structlog.get_logger(__name__)


def _require_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise Forbidden("Administrator role required")


def cancel_order(principal: Principal, order_id: str, reason: str | None = None) -> Order:
    """Cancel an order on behalf of its owner or an administrator.

    Stock is released only after the cancellation has been committed.
    """
    with order_locks.hold(order_id):
        repo = current_domain.repository_for(Order)
        order = repo.find(order_id)
        if not principal.can_act_for(order.customer_id):
            raise Forbidden("Not allowed to cancel this order")

        released = current_domain.process(
            CancelOrder(
                order_id=str(order_id),
                cancelled_by=principal.role.value,
                reason=reason,
            ),
            asynchronous=False,
        )
        release_all(get_ledger(), released)
        order = repo.find(order_id)

    logger.info(
        "Order cancelled",
        order_id=str(order_id),
        cancelled_by=principal.role.value,
        payment_status=order.payment_status,
    )
    notify_safely(
        NotificationKind.CANCELLATION,
        order.customer_id,
        order_id=str(order.id),
        order_number=order.order_number,
        refund_amount=order.refund_amount() if order.payment_status == PaymentStatus.REFUNDED.value else 0.0,
    )
    return order


def update_status(principal: Principal, order_id: str, status: str, note: str | None = None) -> Order:
    """Admin status change. Moving to cancelled runs the full cancellation."""
    _require_admin(principal)
    try:
        target = OrderStatus(status)
    except ValueError as exc:
        raise ValidationError({"status": [f"Unknown order status {status}"]}) from exc
    if target == OrderStatus.CANCELLED:
        return cancel_order(principal, order_id, reason=note)

    with order_locks.hold(order_id):
        current_domain.process(
            UpdateOrderStatus(order_id=str(order_id), status=target.value, note=note),
            asynchronous=False,
        )
        order = current_domain.repository_for(Order).find(order_id)

    logger.info("Order status updated", order_id=str(order_id), status=target.value)
    notify_safely(
        NotificationKind.STATUS_UPDATE,
        order.customer_id,
        order_id=str(order.id),
        order_number=order.order_number,
        status=target.value,
        note=note,
    )
    return order


def update_delivery(
    principal: Principal,
    order_id: str,
    tracking_number: str | None = None,
    courier: str | None = None,
    estimated_delivery=None,
) -> Order:
    _require_admin(principal)
    with order_locks.hold(order_id):
        current_domain.process(
            UpdateDeliveryInfo(
                order_id=str(order_id),
                tracking_number=tracking_number,
                courier=courier,
                estimated_delivery=estimated_delivery,
            ),
            asynchronous=False,
        )
        return current_domain.repository_for(Order).find(order_id)
