"""Inventory ledger port (abstract interface).

The ledger is the only writer of per-product available stock. Every adapter
must make ``reserve`` a single compare-and-decrement: the check that enough
stock exists and the decrement happen as one step at the storage layer, never
as a read followed by a write.
"""

from abc import ABC, abstractmethod


class StockLedger(ABC):
    @abstractmethod
    def reserve(self, product_id: str, quantity: int) -> int:
        """Take ``quantity`` units if at least that many are available.

        Returns the stock left after the reservation. Raises ``InsufficientStock``
        without changing anything when fewer units remain, and ``ProductNotFound``
        for a product the ledger does not track.
        """
        ...

    @abstractmethod
    def release(self, product_id: str, quantity: int) -> int:
        """Return ``quantity`` units to stock unconditionally. Returns the new stock."""
        ...

    @abstractmethod
    def available(self, product_id: str) -> int:
        ...

    @abstractmethod
    def set_stock(self, product_id: str, quantity: int) -> None:
        """Seed or overwrite a product's stock (catalogue-owned restocking)."""
        ...
