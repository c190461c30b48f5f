# Import SQLAlchemy models so they register on Base.metadata
from app.models.order import (  # noqa: F401
    DeliveryType,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from app.models.order_status_history import OrderStatusHistory  # noqa: F401
from app.models.store_setting import StoreSetting  # noqa: F401
