"""Cart reads."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart


def get_cart(customer_id) -> ShoppingCart:
    """Return the customer's cart, creating and saving an empty one on first access."""
    repo = current_domain.repository_for(ShoppingCart)
    try:
        return repo.get(str(customer_id))
    except ObjectNotFoundError:
        cart = ShoppingCart.create(customer_id=str(customer_id))
        repo.add(cart)
        return cart
