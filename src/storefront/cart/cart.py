"""Shopping Cart aggregate: one mutable cart per customer.

The cart is the staging area before checkout. It is identified by the
customer it belongs to, created on first touch and never deleted, only
emptied. Unit prices are captured when a line is added; totals are derived
from the lines on every mutation and never accepted from a caller. Nothing in
the cart touches stock.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartItemUpdated
from storefront.domain import storefront
from storefront.errors import CartItemNotFound
from storefront.pricing import amounts_match, basket_total, item_count, line_total


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    total_amount = Float(default=0.0)
    total_items = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def totals_must_match_items(self):
        if not amounts_match(self.total_amount, basket_total(self.items)):
            raise ValidationError({"total_amount": ["Cart total does not match its items"]})
        if (self.total_items or 0) != item_count(self.items):
            raise ValidationError({"total_items": ["Cart item count does not match its items"]})

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, total_amount=0.0, total_items=0, created_at=now, updated_at=now)

    def _recompute_totals(self):
        self.total_amount = basket_total(self.items)
        self.total_items = item_count(self.items)
        self.updated_at = datetime.now(UTC)

    def find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise CartItemNotFound({"item_id": [f"Item {item_id} not found in cart"]})
        return item

    def find_line(self, product_id, size=None):
        """Line with the same product and size. A line without a size only matches a request without one."""
        return next(
            (i for i in self.items if str(i.product_id) == str(product_id) and (i.size or None) == (size or None)),
            None,
        )

    def add_item(self, product_id, quantity, unit_price, size=None):
        """Add a line, or replace the quantity of the matching (product, size) line.

        Returns the id of the affected line.
        """
        existing = self.find_line(product_id, size)

        with atomic_change(self):
            if existing:
                existing.quantity = quantity
                existing.unit_price = unit_price
                existing.line_total = line_total(unit_price, quantity)
                item = existing
            else:
                item = CartItem(
                    product_id=product_id,
                    quantity=quantity,
                    size=size,
                    unit_price=unit_price,
                    line_total=line_total(unit_price, quantity),
                    added_at=datetime.now(UTC),
                )
                self.add_items(item)
            self._recompute_totals()

        self.raise_(
            CartItemAdded(
                customer_id=str(self.customer_id),
                item_id=str(item.id),
                product_id=str(product_id),
                size=size,
                quantity=quantity,
                unit_price=unit_price,
                total_amount=self.total_amount,
            )
        )
        return str(item.id)

    def update_item(self, item_id, quantity):
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        item = self.find_item(item_id)
        previous_quantity = item.quantity

        with atomic_change(self):
            item.quantity = quantity
            item.line_total = line_total(item.unit_price, quantity)
            self._recompute_totals()

        self.raise_(
            CartItemUpdated(
                customer_id=str(self.customer_id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                total_amount=self.total_amount,
            )
        )

    def remove_item(self, item_id):
        item = self.find_item(item_id)

        with atomic_change(self):
            self.remove_items(item)
            self._recompute_totals()

        self.raise_(
            CartItemRemoved(
                customer_id=str(self.customer_id),
                item_id=str(item_id),
                total_amount=self.total_amount,
            )
        )

    def clear(self):
        removed = len(self.items)
        if removed == 0:
            return

        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self._recompute_totals()

        self.raise_(
            CartCleared(
                customer_id=str(self.customer_id),
                items_removed=removed,
                cleared_at=datetime.now(UTC),
            )
        )

    def snapshot(self):
        """Lines as plain dicts, the shape checkout consumes."""
        return [
            {
                "product_id": str(item.product_id),
                "quantity": item.quantity,
                "size": item.size,
            }
            for item in self.items
        ]
