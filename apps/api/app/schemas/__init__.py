from app.schemas.order import (
    OrderCreate,
    OrderItem,
    OrderResponse,
    OrderStatusUpdate,
    PaymentStatusUpdate,
    SlipUploadResponse,
    StatusHistoryEntry,
)
from app.schemas.store import (
    SpecialMenu,
    StoreHours,
    StoreStatus,
    StoreStatusResponse,
    StoreStatusUpdate,
    StoreStatusUpdateResponse,
)

__all__ = [
    "OrderCreate",
    "OrderItem",
    "OrderResponse",
    "OrderStatusUpdate",
    "PaymentStatusUpdate",
    "SlipUploadResponse",
    "StatusHistoryEntry",
    "SpecialMenu",
    "StoreHours",
    "StoreStatus",
    "StoreStatusResponse",
    "StoreStatusUpdate",
    "StoreStatusUpdateResponse",
]
