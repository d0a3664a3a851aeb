"""Order status changes: commands and handler.

``CancelOrder`` returns the (product_id, quantity) pairs whose stock the caller
must release once the cancellation has been committed.
"""

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    cancelled_by = String(required=True, max_length=50)
    reason = String(max_length=500)


@storefront.command(part_of="Order")
class UpdateDeliveryInfo:
    order_id = Identifier(required=True)
    tracking_number = String(max_length=255)
    courier = String(max_length=100)
    estimated_delivery = DateTime()


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        order.transition_to(OrderStatus(command.status), note=command.note)
        repo.add(order)

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        released = order.cancel(cancelled_by=command.cancelled_by, reason=command.reason)
        repo.add(order)
        return released

    @handle(UpdateDeliveryInfo)
    def update_delivery_info(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        order.update_delivery(
            tracking_number=command.tracking_number,
            courier=command.courier,
            estimated_delivery=command.estimated_delivery,
        )
        repo.add(order)
