"""Cart item management: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.lookup import ensure_in_stock, require_product, validate_size
from storefront.domain import storefront


def load_or_create(customer_id):
    """The customer's cart, or a fresh unsaved one on first touch."""
    repo = current_domain.repository_for(ShoppingCart)
    try:
        return repo.get(str(customer_id))
    except ObjectNotFoundError:
        return ShoppingCart.create(customer_id=str(customer_id))


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20)


@storefront.command(part_of="ShoppingCart")
class UpdateCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class RemoveCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = require_product(command.product_id)
        validate_size(product, command.size)
        ensure_in_stock(product, command.quantity)

        cart = load_or_create(command.customer_id)
        item_id = cart.add_item(
            product_id=product.product_id,
            quantity=command.quantity,
            unit_price=product.unit_price,
            size=command.size or None,
        )
        current_domain.repository_for(ShoppingCart).add(cart)
        return item_id

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = load_or_create(command.customer_id)
        item = cart.find_item(command.item_id)
        ensure_in_stock(require_product(item.product_id), command.quantity)

        cart.update_item(item_id=command.item_id, quantity=command.quantity)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        cart = load_or_create(command.customer_id)
        cart.remove_item(item_id=command.item_id)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_or_create(command.customer_id)
        cart.clear()
        current_domain.repository_for(ShoppingCart).add(cart)
