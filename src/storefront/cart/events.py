"""Domain events for the ShoppingCart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product line was added, or an existing line's quantity replaced."""

    __version__ = 1

    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(max_length=20)
    quantity = Integer(required=True)
    unit_price = Float(required=True)
    total_amount = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemUpdated:
    __version__ = 1

    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    total_amount = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = 1

    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    total_amount = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """All lines were removed, by the customer or by a successful checkout."""

    __version__ = 1

    customer_id = Identifier(required=True)
    items_removed = Integer(required=True)
    cleared_at = DateTime(required=True)
