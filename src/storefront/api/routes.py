"""FastAPI routes for the storefront: cart and orders."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.dependencies import admin_principal, current_principal
from storefront.api.schemas import (
    AddToCartRequest,
    CancelOrderRequest,
    CartItemIdResponse,
    CartItemResponse,
    CartResponse,
    CheckoutRequest,
    DeliveryInfoRequest,
    DeliveryInfoResponse,
    ErrorResponse,
    OrderIdResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    PaymentInfoResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    StatusEntryResponse,
    UpdateCartItemRequest,
    UpdateStatusRequest,
    VerifyPaymentRequest,
)
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, ClearCart, RemoveCartItem, UpdateCartItem
from storefront.cart.queries import get_cart
from storefront.identity.principal import Principal
from storefront.order.checkout import checkout
from storefront.order.lifecycle import cancel_order, update_delivery, update_status
from storefront.order.order import Order
from storefront.order.queries import get_order, list_all_orders, list_my_orders
from storefront.payments.reconciliation import create_payment_intent, verify_and_apply


COMMON_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Presenters
# ---------------------------------------------------------------------------
def cart_response(cart: ShoppingCart) -> CartResponse:
    return CartResponse(
        customer_id=str(cart.customer_id),
        items=[
            CartItemResponse(
                item_id=str(item.id),
                product_id=str(item.product_id),
                quantity=item.quantity,
                size=item.size,
                unit_price=item.unit_price,
                line_total=item.line_total,
            )
            for item in cart.items
        ],
        total_amount=cart.total_amount or 0.0,
        total_items=cart.total_items or 0,
    )


def order_response(order: Order) -> OrderResponse:
    address = order.shipping_address
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        items=[OrderItemResponse(**line) for line in order.lines()],
        total_amount=order.total_amount,
        currency=order.currency,
        shipping_address=(
            {
                "street": address.street,
                "city": address.city,
                "state": address.state,
                "zip_code": address.zip_code,
                "country": address.country,
            }
            if address
            else None
        ),
        payment_info=PaymentInfoResponse(
            gateway_order_id=order.gateway_order_id,
            gateway_payment_id=order.gateway_payment_id,
            status=order.payment_status,
            method=order.payment_method,
            amount_paid=order.amount_paid or 0.0,
        ),
        order_status=order.status,
        delivery_info=DeliveryInfoResponse(
            tracking_number=order.tracking_number,
            courier=order.courier,
            estimated_delivery=order.estimated_delivery,
        ),
        status_history=[
            StatusEntryResponse(status=entry.status, note=entry.note, timestamp=entry.timestamp)
            for entry in order.history()
        ],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"], responses=COMMON_ERRORS)


@cart_router.get("", response_model=CartResponse)
async def read_cart(principal: Principal = Depends(current_principal)) -> CartResponse:
    """Return the caller's cart, creating an empty one on first access."""
    return cart_response(get_cart(principal.customer_id))


@cart_router.post("/items", status_code=201, response_model=CartItemIdResponse)
async def add_to_cart(body: AddToCartRequest, principal: Principal = Depends(current_principal)) -> CartItemIdResponse:
    command = AddToCart(
        customer_id=principal.customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
    )
    item_id = current_domain.process(command, asynchronous=False)
    return CartItemIdResponse(item_id=item_id)


@cart_router.put("/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    principal: Principal = Depends(current_principal),
) -> CartResponse:
    command = UpdateCartItem(customer_id=principal.customer_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return cart_response(get_cart(principal.customer_id))


@cart_router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_cart_item(item_id: str, principal: Principal = Depends(current_principal)) -> CartResponse:
    current_domain.process(RemoveCartItem(customer_id=principal.customer_id, item_id=item_id), asynchronous=False)
    return cart_response(get_cart(principal.customer_id))


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(principal: Principal = Depends(current_principal)) -> CartResponse:
    current_domain.process(ClearCart(customer_id=principal.customer_id), asynchronous=False)
    return cart_response(get_cart(principal.customer_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(
    prefix="/orders",
    tags=["orders"],
    responses={**COMMON_ERRORS, 403: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: CheckoutRequest, principal: Principal = Depends(current_principal)) -> OrderIdResponse:
    """Check out the caller's cart, or the explicit items in the request."""
    items = [item.model_dump() for item in body.items] if body.items is not None else None
    order_id = checkout(principal, body.shipping_address.model_dump(), items=items)
    order = current_domain.repository_for(Order).find(order_id)
    return OrderIdResponse(order_id=order_id, order_number=order.order_number)


@order_router.post("/payment-intent", status_code=201, response_model=PaymentIntentResponse)
def payment_intent(
    body: PaymentIntentRequest,
    principal: Principal = Depends(current_principal),
) -> PaymentIntentResponse:
    """Runs in the threadpool: the gateway call blocks for up to its timeout."""
    intent = create_payment_intent(principal, amount=body.amount, order_id=body.order_id)
    return PaymentIntentResponse(
        intent_id=intent.intent_id,
        amount=intent.amount,
        amount_minor=intent.amount_minor,
        currency=intent.currency,
        receipt=intent.receipt,
    )


@order_router.post("/verify-payment", response_model=OrderResponse)
def verify_payment(body: VerifyPaymentRequest) -> OrderResponse:
    """Gateway callback relayed by the client. Authenticity comes from the signature alone.

    A plain ``def`` so the blocking payment lookup runs in the threadpool.
    """
    order = verify_and_apply(body.gateway_order_id, body.gateway_payment_id, body.signature)
    return order_response(order)


@order_router.get("/mine", response_model=OrderListResponse)
async def my_orders(
    limit: int = Query(default=50, ge=1, le=200),
    principal: Principal = Depends(current_principal),
) -> OrderListResponse:
    orders = list_my_orders(principal, limit=limit)
    return OrderListResponse(orders=[order_response(o) for o in orders], count=len(orders))


@order_router.get("", response_model=OrderListResponse)
async def all_orders(
    limit: int = Query(default=100, ge=1, le=200),
    status: str | None = None,
    principal: Principal = Depends(admin_principal),
) -> OrderListResponse:
    orders = list_all_orders(principal, limit=limit, status=status)
    return OrderListResponse(orders=[order_response(o) for o in orders], count=len(orders))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def read_order(order_id: str, principal: Principal = Depends(current_principal)) -> OrderResponse:
    return order_response(get_order(principal, order_id))


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel(
    order_id: str,
    body: CancelOrderRequest | None = None,
    principal: Principal = Depends(current_principal),
) -> OrderResponse:
    order = cancel_order(principal, order_id, reason=body.reason if body else None)
    return order_response(order)


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
async def change_status(
    order_id: str,
    body: UpdateStatusRequest,
    principal: Principal = Depends(admin_principal),
) -> OrderResponse:
    return order_response(update_status(principal, order_id, body.status, note=body.note))


@order_router.patch("/{order_id}/delivery", response_model=OrderResponse)
async def change_delivery(
    order_id: str,
    body: DeliveryInfoRequest,
    principal: Principal = Depends(admin_principal),
) -> OrderResponse:
    order = update_delivery(
        principal,
        order_id,
        tracking_number=body.tracking_number,
        courier=body.courier,
        estimated_delivery=body.estimated_delivery,
    )
    return order_response(order)
