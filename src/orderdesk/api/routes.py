"""FastAPI routes for OrderDesk: checkout, payments, orders and failed orders."""

import json

from fastapi import APIRouter, HTTPException, Query
from protean.utils.globals import current_domain

from orderdesk.api.schemas import (
    ConfigureGatewayRequest,
    DeliveryFeeRequest,
    DeliveryQuoteResponse,
    DispatchResponse,
    FailedOrderListResponse,
    FailedOrderResponse,
    GatewayConfigResponse,
    OrderDetailResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderSummaryResponse,
    PaymentCancellationRequest,
    PaymentFailureRequest,
    PlacedOrderResponse,
    PlaceOrderRequest,
    PurgeResponse,
    RecordedResponse,
    ShipmentResponse,
    StatusResponse,
    TrackingResponse,
    UpdateDeliveryStatusRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    VerifyPaymentRequest,
)
from orderdesk.checkout.placement import PlaceOrder
from orderdesk.checkout.quote import quote_delivery
from orderdesk.config import is_production
from orderdesk.failed_order.purge import PurgeFailedOrders, list_failed_orders
from orderdesk.gateway import get_gateway
from orderdesk.gateway.fake_adapter import FakeGateway
from orderdesk.money import format_inr
from orderdesk.order.delivery import UpdateDeliveryStatus
from orderdesk.order.order import Order
from orderdesk.order.payment import RecordPaymentCancellation, RecordPaymentFailure, record_payment_success
from orderdesk.order.payment_status import UpdatePaymentStatus
from orderdesk.order.shipment import CreateShipment, TrackShipment, dispatch_pending_shipments
from orderdesk.order.status import UpdateOrderStatus
from orderdesk.reporting.filters import ALL, OrderFilters
from orderdesk.reporting.listing import list_orders


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def _summary_fields(order: Order) -> dict:
    total = order.pricing.total_amount if order.pricing else 0
    return {
        "order_id": str(order.id),
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "delivery_provider": order.delivery_provider,
        "order_status": order.order_status,
        "payment_status": order.payment_status,
        "delivery_status": order.delivery_status,
        "waybill": order.waybill,
        "total_amount": total,
        "total_display": format_inr(total),
        "order_date": _iso(order.order_date),
    }


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/delivery-fee", response_model=DeliveryQuoteResponse)
async def delivery_fee(body: DeliveryFeeRequest) -> DeliveryQuoteResponse:
    """Quote distance, fee and provider for a pincode."""
    quote = quote_delivery(body.pincode)
    return DeliveryQuoteResponse(fee_display=format_inr(quote["fee"]), **quote)


@checkout_router.post("/orders", status_code=201, response_model=PlacedOrderResponse)
async def place_order(body: PlaceOrderRequest) -> PlacedOrderResponse:
    """Place a pending order and open a gateway order for it."""
    command = PlaceOrder(
        customer_id=body.customer_id,
        address_type=body.address_type,
        first_name=body.first_name,
        last_name=body.last_name,
        street=body.street,
        city=body.city,
        state=body.state,
        postcode=body.postcode,
        email=body.email,
        phone=body.phone,
        items=json.dumps([item.model_dump() for item in body.items]),
    )
    result = current_domain.process(command, asynchronous=False)
    return PlacedOrderResponse(**result)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/verify", response_model=StatusResponse)
async def verify_payment(body: VerifyPaymentRequest) -> StatusResponse:
    """Gateway success callback. Responds 402 when the signature does not verify."""
    record_payment_success(
        order_id=body.order_id,
        gateway_order_ref=body.gateway_order_ref,
        payment_id=body.payment_id,
        signature=body.signature,
        amount=body.amount,
        method=body.method,
    )
    return StatusResponse(status="paid")


@payment_router.post("/failure", response_model=RecordedResponse)
async def payment_failure(body: PaymentFailureRequest) -> RecordedResponse:
    command = RecordPaymentFailure(
        order_id=body.order_id,
        reason=body.reason,
        payment_id=body.payment_id,
        error_code=body.error_code,
        error_description=body.error_description,
    )
    recorded = current_domain.process(command, asynchronous=False)
    return RecordedResponse(recorded=recorded)


@payment_router.post("/cancel", response_model=RecordedResponse)
async def payment_cancelled(body: PaymentCancellationRequest) -> RecordedResponse:
    recorded = current_domain.process(RecordPaymentCancellation(order_id=body.order_id), asynchronous=False)
    return RecordedResponse(recorded=recorded)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if is_production():
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse)
async def get_orders(
    page: int = Query(default=1, ge=1),
    size: int = Query(default=20, ge=1, le=100),
    provider: str = ALL,
    order_status: str = ALL,
    payment_status: str = ALL,
    delivery_status: str = ALL,
    date_range: str = ALL,
    search: str = "",
) -> OrderListResponse:
    """One page of orders with console stats, filtered."""
    filters = OrderFilters(
        provider=provider,
        order_status=order_status,
        payment_status=payment_status,
        delivery_status=delivery_status,
        date_range=date_range,
        search_term=search,
    )
    listing = list_orders(page=page, size=size, filters=filters)
    return OrderListResponse(
        orders=[OrderSummaryResponse(**_summary_fields(order)) for order in listing["orders"]],
        stats=listing["stats"].to_dict(),
        pagination=listing["pagination"],
    )


@order_router.post("/maintenance/dispatch-shipments", response_model=DispatchResponse)
async def dispatch_shipments() -> DispatchResponse:
    """Create courier shipments for paid orders still missing a waybill."""
    return DispatchResponse(**dispatch_pending_shipments())


@order_router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(order_id: str) -> OrderDetailResponse:
    order = current_domain.repository_for(Order).get(order_id)
    pricing = order.pricing
    return OrderDetailResponse(
        **_summary_fields(order),
        items=[
            OrderItemResponse(
                item_id=item.item_id,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in order.items
        ],
        subtotal=pricing.subtotal if pricing else 0,
        tax=pricing.tax if pricing else 0,
        shipping_total=pricing.shipping_total if pricing else 0,
        distance=order.distance,
        total_weight=order.total_weight,
        status_location=order.status_location,
        confirmed_at=_iso(order.confirmed_at),
        delivered_at=_iso(order.delivered_at),
        failure_reason=order.failure_reason,
        available_actions=order.available_actions(),
    )


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> StatusResponse:
    command = UpdateOrderStatus(order_id=order_id, order_status=body.order_status, override=body.override)
    return StatusResponse(status=current_domain.process(command, asynchronous=False))


@order_router.put("/{order_id}/payment-status", response_model=StatusResponse)
async def update_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> StatusResponse:
    command = UpdatePaymentStatus(order_id=order_id, payment_status=body.payment_status)
    return StatusResponse(status=current_domain.process(command, asynchronous=False))


@order_router.put("/{order_id}/delivery-status", response_model=StatusResponse)
async def update_delivery_status(order_id: str, body: UpdateDeliveryStatusRequest) -> StatusResponse:
    command = UpdateDeliveryStatus(order_id=order_id, delivery_status=body.delivery_status, location=body.location)
    return StatusResponse(status=current_domain.process(command, asynchronous=False))


@order_router.post("/{order_id}/shipment", response_model=ShipmentResponse)
async def create_shipment(order_id: str) -> ShipmentResponse:
    """Force-create the courier shipment. Returns the existing waybill if there is one."""
    waybill = current_domain.process(CreateShipment(order_id=order_id), asynchronous=False)
    return ShipmentResponse(order_id=order_id, waybill=waybill)


@order_router.get("/{order_id}/tracking", response_model=TrackingResponse)
async def track_order(order_id: str) -> TrackingResponse:
    result = current_domain.process(TrackShipment(order_id=order_id), asynchronous=False)
    return TrackingResponse(order_id=order_id, **result)


# ---------------------------------------------------------------------------
# Failed Order Router
# ---------------------------------------------------------------------------
failed_order_router = APIRouter(prefix="/failed-orders", tags=["failed-orders"])


@failed_order_router.get("", response_model=FailedOrderListResponse)
async def get_failed_orders(
    page: int = Query(default=1, ge=1),
    size: int = Query(default=20, ge=1, le=100),
) -> FailedOrderListResponse:
    listing = list_failed_orders(page=page, size=size)
    return FailedOrderListResponse(
        failed_orders=[
            FailedOrderResponse(
                order_id=str(failed.order_id),
                customer_name=failed.customer_name,
                customer_email=failed.customer_email,
                customer_phone=failed.customer_phone,
                total_amount=failed.total_amount or 0,
                total_display=format_inr(failed.total_amount or 0),
                payment_status=failed.payment_status,
                error=failed.display_error,
                error_code=failed.error_code,
                failed_at=_iso(failed.failed_at),
            )
            for failed in listing["failed_orders"]
        ],
        pagination=listing["pagination"],
    )


@failed_order_router.delete("", response_model=PurgeResponse)
async def clean_failed_orders() -> PurgeResponse:
    purged = current_domain.process(PurgeFailedOrders(requested_by="admin-console"), asynchronous=False)
    return PurgeResponse(purged=purged)
