from datetime import datetime
from decimal import Decimal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from app.models.order import DeliveryType, OrderStatus, PaymentMethod, PaymentStatus


class OrderItem(BaseModel):
    """Snapshot of one unit of a product at the time it was ordered."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, max_length=64)
    product_id: str = Field(
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("product_id", "productId"),
    )
    product_name: str = Field(
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("product_name", "productName", "name"),
    )
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    note: str | None = Field(default=None, max_length=500)
    options: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("options", "selectedOptions", "selected_options"),
    )

    @field_serializer("price")
    def serialize_price(self, value: Decimal) -> float:
        return float(value)


class OrderCreate(BaseModel):
    items: list[OrderItem] = Field(min_length=1)
    total_amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    customer_name: str = Field(max_length=255)
    customer_phone: str = Field(max_length=50)
    line_user_id: str | None = Field(default=None, max_length=64)
    delivery_type: DeliveryType = DeliveryType.PICKUP
    delivery_address: str | None = None
    landmark: str | None = None
    distance_km: float | None = Field(default=None, ge=0)
    payment_method: PaymentMethod
    note: str | None = Field(default=None, max_length=1000)

    @field_validator("customer_name", "customer_phone", "delivery_address", "landmark", "note")
    @classmethod
    def strip_strings(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return value.strip()

    @field_validator("line_user_id")
    @classmethod
    def blank_user_id_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    items: list[OrderItem]
    total_amount: Decimal
    customer_name: str
    customer_phone: str
    line_user_id: str | None
    delivery_type: DeliveryType
    delivery_address: str | None
    landmark: str | None
    distance_km: float | None
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    slip_image_url: str | None
    note: str | None
    status: OrderStatus
    created_at: datetime
    updated_at: datetime

    @field_serializer("total_amount")
    def serialize_total(self, value: Decimal) -> float:
        return float(value)


class OrderStatusUpdate(BaseModel):
    # Kept as a plain string so unknown values are rejected by the service
    # with the same 400 response as every other domain validation error.
    status: str


class PaymentStatusUpdate(BaseModel):
    payment_status: str


class SlipUploadResponse(BaseModel):
    message: str
    order: OrderResponse


class StatusHistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: str
    status: OrderStatus
    changed_at: datetime

