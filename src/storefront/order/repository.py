"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import OrderNotFound
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    """Order lookups beyond the base CRUD operations.

    Listings are newest first and capped by ``limit``.
    """

    def find(self, order_id: str) -> Order:
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError as exc:
            raise OrderNotFound({"order_id": [f"Order {order_id} not found"]}) from exc

    def find_by_gateway_order_id(self, gateway_order_id: str) -> Order:
        results = self._dao.query.filter(gateway_order_id=gateway_order_id).all().items
        if not results:
            raise OrderNotFound({"gateway_order_id": [f"No order for gateway order {gateway_order_id}"]})
        return results[0]

    def for_customer(self, customer_id: str, limit: int = 50) -> list[Order]:
        return self._dao.query.filter(customer_id=str(customer_id)).order_by("-created_at").limit(limit).all().items

    def latest(self, limit: int = 100, status: str | None = None) -> list[Order]:
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        return query.order_by("-created_at").limit(limit).all().items
