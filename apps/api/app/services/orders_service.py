import time
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.dependencies import EventPublisher
from app.models.order import DeliveryType, Order, OrderStatus, PaymentStatus
from app.models.order_status_history import OrderStatusHistory
from app.observability import log_event, metrics_store, record_order_status
from app.schemas.order import OrderCreate, OrderResponse
from app.services.broadcast import (
    ADMIN_ROOM,
    NEW_ORDER,
    ORDER_STATUS_UPDATED,
    ORDER_UPDATED,
    order_room,
)
from app.services.errors import OrderNotFoundError, OrderValidationError
from app.services.state_machine import parse_status

ORDER_ID_PREFIX = "TP"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _generate_order_id(now_ms: int | None = None) -> str:
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{ORDER_ID_PREFIX}{timestamp}"


def _generate_unique_order_id(db: Session) -> str:
    # Ids embed the creation millisecond; step forward past any id already taken.
    timestamp = int(time.time() * 1000)
    while True:
        order_id = _generate_order_id(timestamp)
        exists = db.scalar(select(Order.id).where(Order.id == order_id))
        if not exists:
            return order_id
        timestamp += 1


def _order_payload(order: Order) -> dict:
    return OrderResponse.model_validate(order).model_dump(mode="json")


def _append_history(db: Session, order_id: str, status_value: OrderStatus) -> None:
    db.add(OrderStatusHistory(order_id=order_id, status=status_value, changed_at=_now_utc()))


def validate_order_payload(payload: OrderCreate) -> None:
    if not payload.customer_name:
        raise OrderValidationError("customer_name is required")
    if not payload.customer_phone:
        raise OrderValidationError("customer_phone is required")
    if payload.delivery_type != DeliveryType.PICKUP:
        if not payload.delivery_address:
            raise OrderValidationError("delivery_address is required for delivery orders")
        if not payload.landmark:
            raise OrderValidationError("landmark is required for delivery orders")

    items_total = sum((item.price for item in payload.items), Decimal("0"))
    if items_total != payload.total_amount:
        raise OrderValidationError(
            f"total_amount {payload.total_amount} does not match item prices {items_total}"
        )


def create_order(db: Session, payload: OrderCreate, publisher: EventPublisher) -> Order:
    validate_order_payload(payload)

    now = _now_utc()
    is_pickup = payload.delivery_type == DeliveryType.PICKUP
    order = Order(
        id=_generate_unique_order_id(db),
        items=[item.model_dump(mode="json") for item in payload.items],
        total_amount=payload.total_amount,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        line_user_id=payload.line_user_id,
        delivery_type=payload.delivery_type,
        delivery_address=None if is_pickup else payload.delivery_address,
        landmark=None if is_pickup else payload.landmark,
        distance_km=payload.distance_km,
        payment_method=payload.payment_method,
        payment_status=PaymentStatus.PENDING,
        note=payload.note or None,
        status=OrderStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    db.add(order)
    db.flush()

    _append_history(db, order.id, OrderStatus.PENDING)

    db.commit()
    db.refresh(order)

    metrics_store.increment("orders_created_total")
    record_order_status(order.status.value)
    log_event("order_created", order_id=order.id, status=order.status.value)
    publisher.publish(ADMIN_ROOM, NEW_ORDER, _order_payload(order))
    return order


def get_order(db: Session, order_id: str) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise OrderNotFoundError()
    return order


def list_orders(
    db: Session,
    status_filter: str | None = None,
    limit: int | None = None,
) -> list[Order]:
    query = select(Order)
    if status_filter:
        query = query.where(Order.status == parse_status(status_filter))
    resolved_limit = limit or settings.order_list_default_limit
    query = query.order_by(Order.created_at.desc(), Order.id.desc()).limit(resolved_limit)
    return list(db.scalars(query))


def list_user_orders(db: Session, line_user_id: str, limit: int | None = None) -> list[Order]:
    query = (
        select(Order)
        .where(Order.line_user_id == line_user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit or settings.user_orders_limit)
    )
    return list(db.scalars(query))


def update_order_status(
    db: Session,
    order_id: str,
    status_value: str | OrderStatus,
    publisher: EventPublisher,
) -> Order:
    """Set any recognized status, append a history row and notify subscribers.

    There is no adjacency check: repeating the current status or skipping ahead
    is accepted and still recorded in the history.
    """
    next_status = parse_status(status_value)
    order = get_order(db, order_id)

    previous_status = order.status
    order.status = next_status
    order.updated_at = _now_utc()
    _append_history(db, order.id, next_status)
    db.commit()
    db.refresh(order)

    metrics_store.increment("order_status_updates_total")
    record_order_status(next_status.value)
    log_event(
        f"order_status_updated:{previous_status.value}->{next_status.value}",
        order_id=order.id,
        status=next_status.value,
    )
    payload = _order_payload(order)
    publisher.publish(order_room(order.id), ORDER_STATUS_UPDATED, payload)
    publisher.publish(ADMIN_ROOM, ORDER_UPDATED, payload)
    return order


def update_payment_status(
    db: Session,
    order_id: str,
    payment_status: str | PaymentStatus,
    publisher: EventPublisher,
) -> Order:
    try:
        next_payment_status = PaymentStatus(payment_status)
    except ValueError as err:
        raise OrderValidationError("Invalid payment status") from err

    order = get_order(db, order_id)
    order.payment_status = next_payment_status
    order.updated_at = _now_utc()
    db.commit()
    db.refresh(order)

    log_event(f"order_payment_status_updated:{next_payment_status.value}", order_id=order.id)
    publisher.publish(ADMIN_ROOM, ORDER_UPDATED, _order_payload(order))
    return order


def attach_payment_slip(
    db: Session,
    order_id: str,
    slip_url: str,
    publisher: EventPublisher,
) -> Order:
    if not slip_url:
        raise OrderValidationError("No slip image provided")

    order = get_order(db, order_id)
    order.slip_image_url = slip_url
    order.payment_status = PaymentStatus.PAID
    order.updated_at = _now_utc()
    db.commit()
    db.refresh(order)

    log_event("order_slip_uploaded", order_id=order.id)
    publisher.publish(ADMIN_ROOM, ORDER_UPDATED, _order_payload(order))
    return order


def list_status_history(db: Session, order_id: str) -> list[OrderStatusHistory]:
    get_order(db, order_id)
    rows = db.scalars(
        select(OrderStatusHistory)
        .where(OrderStatusHistory.order_id == order_id)
        .order_by(OrderStatusHistory.changed_at.asc(), OrderStatusHistory.id.asc())
    )
    return list(rows)
