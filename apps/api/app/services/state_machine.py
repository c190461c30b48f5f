from typing import Literal

from app.models.order import OrderStatus
from app.services.errors import OrderValidationError

StatusBucket = Literal["new", "active", "done", "cancelled"]

ORDER_FLOW: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.COOKING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
)

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED}
)

_BUCKETS: dict[OrderStatus, StatusBucket] = {
    OrderStatus.PENDING: "new",
    OrderStatus.CONFIRMED: "active",
    OrderStatus.COOKING: "active",
    OrderStatus.READY: "active",
    OrderStatus.DELIVERED: "done",
    OrderStatus.COMPLETED: "done",
    OrderStatus.CANCELLED: "cancelled",
}


def parse_status(value: str | OrderStatus) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError as err:
        raise OrderValidationError("Invalid status") from err


def next_status(current: OrderStatus) -> OrderStatus | None:
    """Canonical forward step offered as the single advance action.

    The status update operation itself accepts any recognized status; this
    helper is what callers use to offer only the forward move.
    """
    if current not in ORDER_FLOW:
        return None
    index = ORDER_FLOW.index(current)
    if index + 1 >= len(ORDER_FLOW):
        return None
    return ORDER_FLOW[index + 1]


def is_terminal(current: OrderStatus) -> bool:
    return current in TERMINAL_STATUSES


def can_cancel(current: OrderStatus) -> bool:
    return not is_terminal(current)


def status_bucket(current: OrderStatus) -> StatusBucket:
    return _BUCKETS[current]
