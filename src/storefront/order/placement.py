"""Order placement: command and handler.

Stock has already been reserved by the time ``PlaceOrder`` is processed (see
``storefront.order.checkout``). The handler persists the order and empties the
cart in one unit of work, so either both happen or neither does.
"""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.items import load_or_create
from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of priced line dicts
    shipping_address = Text(required=True)  # JSON: address dict
    currency = String(max_length=3, default="INR")


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = json.loads(command.items) if isinstance(command.items, str) else command.items
        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )

        order = Order.place(
            customer_id=command.customer_id,
            lines=lines,
            shipping_address=shipping_address,
            currency=command.currency or "INR",
        )
        current_domain.repository_for(Order).add(order)

        cart = load_or_create(command.customer_id)
        cart.clear()
        current_domain.repository_for(ShoppingCart).add(cart)

        return str(order.id)
