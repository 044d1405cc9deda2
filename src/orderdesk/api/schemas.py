"""Pydantic request/response schemas for the OrderDesk API.

These are the external contracts; the routes translate them into domain
commands. Money crosses the API as integer paise with a formatted rupee
string alongside for display.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class DeliveryFeeRequest(BaseModel):
    pincode: str


class DeliveryQuoteResponse(BaseModel):
    pincode: str
    distance_km: float
    fee: int
    fee_display: str
    delivery_provider: str


class CartItemSchema(BaseModel):
    item_id: str
    name: str
    quantity: int = Field(gt=0)
    unit_price: int = Field(gt=0, description="Price per unit in paise")
    weight: float = Field(default=0.0, ge=0)


class PlaceOrderRequest(BaseModel):
    customer_id: str | None = None
    address_type: str = ""
    first_name: str = ""
    last_name: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    email: str = ""
    phone: str = ""
    items: list[CartItemSchema] = Field(min_length=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "address_type": "Home",
                    "first_name": "Asha",
                    "last_name": "Verma",
                    "street": "12 MG Road",
                    "city": "New Delhi",
                    "state": "Delhi",
                    "postcode": "110001",
                    "email": "asha@example.com",
                    "phone": "9876543210",
                    "items": [
                        {"item_id": "sku-101", "name": "Kaju Katli 500g", "quantity": 2, "unit_price": 50000}
                    ],
                }
            ]
        }
    }


class PlacedOrderResponse(BaseModel):
    order_id: str
    gateway_order_ref: str
    amount: int
    currency: str
    key: str


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class VerifyPaymentRequest(BaseModel):
    order_id: str
    gateway_order_ref: str | None = None
    payment_id: str
    signature: str
    amount: int | None = None
    method: str | None = None


class PaymentFailureRequest(BaseModel):
    order_id: str
    reason: str | None = None
    payment_id: str | None = None
    error_code: str | None = None
    error_description: str | None = None


class PaymentCancellationRequest(BaseModel):
    order_id: str


class RecordedResponse(BaseModel):
    recorded: bool


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Gateway unavailable"


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    order_status: str
    override: bool = False


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: str


class UpdateDeliveryStatusRequest(BaseModel):
    delivery_status: str
    location: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"


class OrderItemResponse(BaseModel):
    item_id: str
    name: str
    quantity: int
    unit_price: int


class OrderSummaryResponse(BaseModel):
    order_id: str
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    delivery_provider: str
    order_status: str
    payment_status: str
    delivery_status: str
    waybill: str | None = None
    total_amount: int
    total_display: str
    order_date: str | None = None


class OrderDetailResponse(OrderSummaryResponse):
    items: list[OrderItemResponse]
    subtotal: int
    tax: int
    shipping_total: int
    distance: float | None = None
    total_weight: float | None = None
    status_location: str | None = None
    confirmed_at: str | None = None
    delivered_at: str | None = None
    failure_reason: str | None = None
    available_actions: dict


class OrderStatsResponse(BaseModel):
    total: int
    by_provider: dict[str, int]
    by_order_status: dict[str, int]


class PaginationResponse(BaseModel):
    page: int
    size: int
    total: int
    pages: int


class OrderListResponse(BaseModel):
    orders: list[OrderSummaryResponse]
    stats: OrderStatsResponse
    pagination: PaginationResponse


class ShipmentResponse(BaseModel):
    order_id: str
    waybill: str


class TrackingResponse(BaseModel):
    order_id: str
    status: str | None = None
    location: str | None = None
    delivery_status: str
    order_status: str
    changed: bool


class DispatchResponse(BaseModel):
    created: int
    failed: int


# ---------------------------------------------------------------------------
# Failed orders
# ---------------------------------------------------------------------------
class FailedOrderResponse(BaseModel):
    order_id: str
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    total_amount: int
    total_display: str
    payment_status: str | None = None
    error: str | None = None
    error_code: str | None = None
    failed_at: str | None = None


class FailedOrderListResponse(BaseModel):
    failed_orders: list[FailedOrderResponse]
    pagination: PaginationResponse


class PurgeResponse(BaseModel):
    purged: int
