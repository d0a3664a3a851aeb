"""Checkout: turn a cart (or an explicit item list) into an order.

Steps, in order:
    1. Price every line from the catalogue as it is now.
    2. Reserve stock for every line, all or nothing.
    3. Persist the order and empty the cart in one unit of work, whether the
       lines came from the cart or were passed explicitly. If that fails,
       the reservations are released before the error propagates.
    4. Send low-stock and confirmation notifications, best effort.
"""

import json
import os

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.cart.queries import get_cart
from storefront.catalogue.lookup import require_product, validate_size
from storefront.identity.principal import Principal
from storefront.inventory import get_ledger, low_stock_threshold
from storefront.inventory.reservations import release_all, reserve_all
from storefront.notifications import notify_safely
from storefront.notifications.port import NotificationKind
from storefront.order.placement import PlaceOrder

logger = structlog.get_logger(__name__)

_ADDRESS_FIELDS = ("street", "city", "state", "zip_code", "country")


def _price_lines(items: list[dict]) -> list[dict]:
    priced = []
    for item in items:
        quantity = item.get("quantity")
        if not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        product = require_product(item.get("product_id"))
        size = item.get("size") or None
        validate_size(product, size)
        priced.append(
            {
                "product_id": product.product_id,
                "quantity": quantity,
                "size": size,
                "unit_price": product.unit_price,
            }
        )
    return priced


def _clean_address(shipping_address: dict) -> dict:
    if not shipping_address:
        raise ValidationError({"shipping_address": ["Shipping address is required"]})
    return {key: shipping_address.get(key) for key in _ADDRESS_FIELDS}


def checkout(principal: Principal, shipping_address: dict, items: list[dict] | None = None) -> str:
    """Place an order for ``principal``.

    With ``items`` omitted the customer's cart is checked out. Either way the
    cart is emptied once the order is placed.
    Returns the new order id.
    """
    if items is None:
        items = get_cart(principal.customer_id).snapshot()
    if not items:
        raise ValidationError({"items": ["Cannot check out an empty cart"]})

    lines = _price_lines(items)
    address = _clean_address(shipping_address)

    ledger = get_ledger()
    reservations = reserve_all(ledger, [(line["product_id"], line["quantity"]) for line in lines])

    try:
        order_id = current_domain.process(
            PlaceOrder(
                customer_id=principal.customer_id,
                items=json.dumps(lines),
                shipping_address=json.dumps(address),
                currency=os.environ.get("PAYMENT_CURRENCY", "INR"),
            ),
            asynchronous=False,
        )
    except Exception:
        logger.warning(
            "Order placement failed, releasing reserved stock",
            customer_id=principal.customer_id,
            lines=len(reservations),
        )
        release_all(ledger, [(r.product_id, r.quantity) for r in reservations])
        raise

    logger.info("Order placed", order_id=order_id, customer_id=principal.customer_id, lines=len(lines))

    threshold = low_stock_threshold()
    for reservation in reservations:
        if reservation.remaining < threshold:
            notify_safely(
                NotificationKind.LOW_STOCK,
                "inventory",
                product_id=reservation.product_id,
                remaining=reservation.remaining,
                threshold=threshold,
            )

    notify_safely(NotificationKind.ORDER_CONFIRMATION, principal.customer_id, order_id=order_id)
    return order_id
