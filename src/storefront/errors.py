"""Error taxonomy for the storefront.

Input and domain-rule violations reuse Protean's ``ValidationError`` (with a
field to messages mapping in ``.messages``) and ``ObjectNotFoundError`` (with the
same kind of mapping as its first argument), so they flow through the same
handlers as framework errors. The remaining kinds have no
Protean counterpart and derive from ``StorefrontError``.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class InsufficientStock(ValidationError):
    """A reservation would drive a product's stock below zero."""


class InvalidStatusTransition(ValidationError):
    """The order status machine rejected the requested transition."""


class ProductNotFound(ObjectNotFoundError):
    pass


class OrderNotFound(ObjectNotFoundError):
    pass


class CartItemNotFound(ObjectNotFoundError):
    pass


class StorefrontError(Exception):
    """Base class for storefront errors that are not Protean exceptions."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(StorefrontError):
    pass


class Forbidden(StorefrontError):
    pass


class VerificationFailed(StorefrontError):
    """The gateway callback signature did not match the locally computed one."""


class GatewayError(StorefrontError):
    """A payment gateway call failed.

    ``retryable`` is set for timeouts, connection failures and 5xx responses,
    where the caller can safely try again.
    """

    def __init__(self, message: str = "Payment gateway unavailable", retryable: bool = True) -> None:
        super().__init__(message)
        self.retryable = retryable
