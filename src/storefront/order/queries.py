"""Order reads with ownership checks."""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.errors import Forbidden
from storefront.identity.principal import Principal
from storefront.order.order import Order, OrderStatus

MAX_PAGE_SIZE = 200


def _check_limit(limit: int) -> int:
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError({"limit": [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]})
    return limit


def get_order(principal: Principal, order_id: str) -> Order:
    """An order visible to its owner and to administrators."""
    order = current_domain.repository_for(Order).find(order_id)
    if not principal.can_act_for(order.customer_id):
        raise Forbidden("Not allowed to view this order")
    return order


def list_my_orders(principal: Principal, limit: int = 50) -> list[Order]:
    return current_domain.repository_for(Order).for_customer(principal.customer_id, limit=_check_limit(limit))


def list_all_orders(principal: Principal, limit: int = 100, status: str | None = None) -> list[Order]:
    if not principal.is_admin:
        raise Forbidden("Administrator role required")
    if status is not None and status not in {s.value for s in OrderStatus}:
        raise ValidationError({"status": [f"Unknown order status {status}"]})
    return current_domain.repository_for(Order).latest(limit=_check_limit(limit), status=status)
