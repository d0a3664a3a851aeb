"""In-memory catalogue adapter for development and testing."""

from dataclasses import replace

from storefront.catalogue.port import Catalogue, ProductSnapshot


class InMemoryCatalogue(Catalogue):
    def __init__(self) -> None:
        self.products: dict[str, ProductSnapshot] = {}

    def add_product(
        self,
        product_id: str,
        name: str,
        price: float,
        discount_price: float | None = None,
        sizes: list[str] | tuple[str, ...] = (),
        is_active: bool = True,
    ) -> ProductSnapshot:
        product = ProductSnapshot(
            product_id=str(product_id),
            name=name,
            price=price,
            discount_price=discount_price,
            sizes=tuple(sizes),
            is_active=is_active,
        )
        self.products[product.product_id] = product
        return product

    def change_price(self, product_id: str, price: float, discount_price: float | None = None) -> None:
        """Simulate a catalogue price edit."""
        current = self.products[str(product_id)]
        self.products[current.product_id] = replace(current, price=price, discount_price=discount_price)

    def find(self, product_id: str) -> ProductSnapshot | None:
        return self.products.get(str(product_id))

    def reset(self) -> None:
        self.products.clear()
