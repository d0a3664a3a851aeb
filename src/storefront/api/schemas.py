"""Pydantic request/response schemas for the storefront API.

These are external contracts, kept separate from the Protean commands and
aggregates they map onto.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str
    city: str
    state: str | None = None
    zip_code: str
    country: str


class CheckoutItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    size: str | None = None


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    size: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "quantity": 2,
                    "size": "M",
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartItemResponse(BaseModel):
    item_id: str
    product_id: str
    quantity: int
    size: str | None = None
    unit_price: float
    line_total: float


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartItemResponse]
    total_amount: float
    total_items: int


class CartItemIdResponse(BaseModel):
    item_id: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    shipping_address: AddressSchema
    items: list[CheckoutItemSchema] | None = None


class OrderIdResponse(BaseModel):
    order_id: str
    order_number: str


class PaymentIntentRequest(BaseModel):
    order_id: str | None = None
    amount: float | None = Field(default=None, gt=0)


class PaymentIntentResponse(BaseModel):
    intent_id: str
    amount: float
    amount_minor: int
    currency: str
    receipt: str


class VerifyPaymentRequest(BaseModel):
    gateway_order_id: str
    gateway_payment_id: str
    signature: str


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class UpdateStatusRequest(BaseModel):
    status: str
    note: str | None = None


class DeliveryInfoRequest(BaseModel):
    tracking_number: str | None = None
    courier: str | None = None
    estimated_delivery: datetime | None = None


class OrderItemResponse(BaseModel):
    product_id: str
    quantity: int
    size: str | None = None
    unit_price: float
    line_total: float


class StatusEntryResponse(BaseModel):
    status: str
    note: str | None = None
    timestamp: datetime


class PaymentInfoResponse(BaseModel):
    gateway_order_id: str | None = None
    gateway_payment_id: str | None = None
    status: str
    method: str | None = None
    amount_paid: float = 0.0


class DeliveryInfoResponse(BaseModel):
    tracking_number: str | None = None
    courier: str | None = None
    estimated_delivery: datetime | None = None


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    items: list[OrderItemResponse]
    total_amount: float
    currency: str
    shipping_address: AddressSchema | None = None
    payment_info: PaymentInfoResponse
    order_status: str
    delivery_info: DeliveryInfoResponse
    status_history: list[StatusEntryResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    count: int


class ErrorResponse(BaseModel):
    error: str
    detail: dict | str
