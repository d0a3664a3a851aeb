"""Catalogue port: read-only product lookup.

The catalogue owns product data. This core only needs a price snapshot and
the allowed sizes at the moment an item is carted or an order is placed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class Size(Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"
    XXXL = "XXXL"
    FREE_SIZE = "Free Size"


ALLOWED_SIZES = frozenset(s.value for s in Size)


@dataclass(frozen=True)
class ProductSnapshot:
    """A product as the catalogue reports it right now."""

    product_id: str
    name: str
    price: float
    discount_price: float | None = None
    sizes: tuple[str, ...] = field(default_factory=tuple)
    is_active: bool = True

    @property
    def unit_price(self) -> float:
        """Price a customer pays: the discounted price when one is set."""
        if self.discount_price is not None and self.discount_price > 0:
            return self.discount_price
        return self.price


class Catalogue(ABC):
    @abstractmethod
    def find(self, product_id: str) -> ProductSnapshot | None:
        """Return the product, or None when the catalogue has no such product."""
        ...
