from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.auth.dependencies import AuthContext, require_admin
from app.config import settings
from app.db.session import get_db
from app.dependencies import EventPublisher, get_event_publisher
from app.observability import observe_timing
from app.schemas.order import (
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
    PaymentStatusUpdate,
    SlipUploadResponse,
    StatusHistoryEntry,
)
from app.services.orders_service import (
    attach_payment_slip,
    create_order,
    get_order,
    list_orders,
    list_status_history,
    list_user_orders,
    update_order_status,
    update_payment_status,
)
from app.services.slip_storage import store_slip

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
)
def create_order_endpoint(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> OrderResponse:
    with observe_timing("order_create_seconds"):
        order = create_order(db, payload, publisher)
    return OrderResponse.model_validate(order)


@router.get("", response_model=list[OrderResponse], summary="List orders for the POS dashboard")
def list_orders_endpoint(
    db: Session = Depends(get_db),
    status_filter: str | None = Query(default=None, alias="status"),
    limit: int = Query(default=settings.order_list_default_limit, ge=1),
    _auth: AuthContext = Depends(require_admin),
) -> list[OrderResponse]:
    resolved_limit = min(limit, settings.order_list_max_limit)
    orders = list_orders(db, status_filter=status_filter, limit=resolved_limit)
    return [OrderResponse.model_validate(order) for order in orders]


@router.get(
    "/user/{line_user_id}",
    response_model=list[OrderResponse],
    summary="List a customer's recent orders",
)
def list_user_orders_endpoint(
    line_user_id: str,
    db: Session = Depends(get_db),
) -> list[OrderResponse]:
    return [OrderResponse.model_validate(order) for order in list_user_orders(db, line_user_id)]


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order")
def get_order_endpoint(order_id: str, db: Session = Depends(get_db)) -> OrderResponse:
    return OrderResponse.model_validate(get_order(db, order_id))


@router.put("/{order_id}/status", response_model=OrderResponse, summary="Update order status")
def update_status_endpoint(
    order_id: str,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    _auth: AuthContext = Depends(require_admin),
) -> OrderResponse:
    order = update_order_status(db, order_id, payload.status, publisher)
    return OrderResponse.model_validate(order)


@router.put(
    "/{order_id}/payment",
    response_model=OrderResponse,
    summary="Update order payment status",
)
def update_payment_endpoint(
    order_id: str,
    payload: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    _auth: AuthContext = Depends(require_admin),
) -> OrderResponse:
    order = update_payment_status(db, order_id, payload.payment_status, publisher)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/slip", response_model=SlipUploadResponse, summary="Upload payment slip")
def upload_slip_endpoint(
    order_id: str,
    slip: UploadFile = File(...),
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> SlipUploadResponse:
    get_order(db, order_id)
    slip_url = store_slip(slip.file.read(), slip.content_type)
    order = attach_payment_slip(db, order_id, slip_url, publisher)
    return SlipUploadResponse(message="Slip uploaded", order=OrderResponse.model_validate(order))


@router.get(
    "/{order_id}/history",
    response_model=list[StatusHistoryEntry],
    summary="Get order status history",
)
def get_history_endpoint(order_id: str, db: Session = Depends(get_db)) -> list[StatusHistoryEntry]:
    return [StatusHistoryEntry.model_validate(row) for row in list_status_history(db, order_id)]
