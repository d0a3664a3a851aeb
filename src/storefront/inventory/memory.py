"""Thread-safe in-memory stock ledger.

Each product's counter is guarded by its own lock, so the availability check
and the decrement in ``reserve`` run as one critical section per product.
"""

from protean.exceptions import ValidationError

from storefront.errors import InsufficientStock, ProductNotFound
from storefront.inventory.port import StockLedger
from storefront.utils.locks import KeyedLock


def _check_quantity(quantity: int) -> None:
    if quantity is None or quantity <= 0:
        raise ValidationError({"quantity": ["Quantity must be positive"]})


class InMemoryStockLedger(StockLedger):
    def __init__(self, initial: dict[str, int] | None = None) -> None:
        self._stock: dict[str, int] = {}
        self._locks = KeyedLock()
        for product_id, quantity in (initial or {}).items():
            self.set_stock(product_id, quantity)

    def reserve(self, product_id: str, quantity: int) -> int:
        _check_quantity(quantity)
        product_id = str(product_id)
        with self._locks.hold(product_id):
            if product_id not in self._stock:
                raise ProductNotFound({"product_id": [f"No stock record for product {product_id}"]})
            available = self._stock[product_id]
            if available < quantity:
                raise InsufficientStock(
                    {"quantity": [f"Insufficient stock: {available} available, {quantity} requested"]}
                )
            self._stock[product_id] = available - quantity
            return self._stock[product_id]

    def release(self, product_id: str, quantity: int) -> int:
        _check_quantity(quantity)
        product_id = str(product_id)
        with self._locks.hold(product_id):
            if product_id not in self._stock:
                raise ProductNotFound({"product_id": [f"No stock record for product {product_id}"]})
            self._stock[product_id] += quantity
            return self._stock[product_id]

    def available(self, product_id: str) -> int:
        product_id = str(product_id)
        with self._locks.hold(product_id):
            if product_id not in self._stock:
                raise ProductNotFound({"product_id": [f"No stock record for product {product_id}"]})
            return self._stock[product_id]

    def set_stock(self, product_id: str, quantity: int) -> None:
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Stock cannot be negative"]})
        product_id = str(product_id)
        with self._locks.hold(product_id):
            self._stock[product_id] = quantity

    def reset(self) -> None:
        self._stock.clear()
