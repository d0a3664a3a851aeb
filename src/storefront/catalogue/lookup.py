"""Product lookups shared by the cart and checkout."""

from protean.exceptions import ValidationError

from storefront.catalogue import get_catalogue
from storefront.catalogue.port import ALLOWED_SIZES, ProductSnapshot
from storefront.errors import InsufficientStock, ProductNotFound
from storefront.inventory import get_ledger


def require_product(product_id: str) -> ProductSnapshot:
    """Fetch a product that can currently be sold."""
    product = get_catalogue().find(str(product_id))
    if product is None or not product.is_active:
        raise ProductNotFound({"product_id": [f"Product {product_id} not found"]})
    return product


def validate_size(product: ProductSnapshot, size: str | None) -> None:
    """A size is only checked when one is supplied."""
    if not size:
        return
    if size not in ALLOWED_SIZES:
        raise ValidationError({"size": [f"Unknown size {size}"]})
    if product.sizes and size not in product.sizes:
        raise ValidationError({"size": [f"Size {size} is not available for {product.name}"]})


def ensure_in_stock(product: ProductSnapshot, quantity: int) -> None:
    """Advisory stock check for carting. The binding check happens at reservation."""
    try:
        available = get_ledger().available(product.product_id)
    except ProductNotFound:
        available = 0
    if available < quantity:
        raise InsufficientStock({"quantity": [f"Only {available} of {product.name} in stock"]})
