"""Order submission from the storefront cart."""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from clients.shared.api import ApiClient, ApiError
from clients.shared.config import ERROR_MESSAGES
from clients.shared.realtime import RealtimeClient, order_room
from clients.storefront.cart_store import CartStore
from clients.storefront.customer_store import CustomerStore
from clients.storefront.models import CartItem, sum_prices, to_money
from clients.storefront.store_status import StoreStatusStore

logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = "ตะกร้าว่างเปล่า"
MISSING_CONTACT_MESSAGE = "กรุณากรอกชื่อและเบอร์โทร"
MISSING_ADDRESS_MESSAGE = "กรุณากรอกที่อยู่จัดส่ง"
MISSING_LANDMARK_MESSAGE = "กรุณากรอกจุดสังเกต"


class CheckoutError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CheckoutForm(BaseModel):
    customer_name: str = ""
    customer_phone: str = ""
    delivery_type: Literal["pickup", "free-delivery", "easy-delivery"] = "pickup"
    delivery_address: str = ""
    landmark: str = ""
    distance_km: float | None = Field(default=None, ge=0)
    payment_method: Literal["cash", "promptpay"] = "cash"
    note: str = ""

    @field_validator("customer_name", "customer_phone", "delivery_address", "landmark", "note")
    @classmethod
    def strip_strings(cls, value: str) -> str:
        return value.strip()

    @property
    def is_pickup(self) -> bool:
        return self.delivery_type == "pickup"


def build_order_request(
    items: list[CartItem],
    form: CheckoutForm,
    line_user_id: str | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "items": [
            {
                "id": item.id,
                "productId": item.product.id,
                "productName": item.product.name,
                "price": float(to_money(item.product.price)),
                "note": item.note or None,
                "selectedOptions": item.selected_options,
            }
            for item in items
        ],
        "total_amount": float(sum_prices(item.product.price for item in items)),
        "customer_name": form.customer_name,
        "customer_phone": form.customer_phone,
        "line_user_id": line_user_id,
        "delivery_type": form.delivery_type,
        "payment_method": form.payment_method,
        "note": form.note or None,
    }
    if not form.is_pickup:
        payload["delivery_address"] = form.delivery_address
        payload["landmark"] = form.landmark
        payload["distance_km"] = form.distance_km
    return payload


class CheckoutFlow:
    def __init__(
        self,
        api: ApiClient,
        cart: CartStore,
        customer: CustomerStore,
        realtime: RealtimeClient | None = None,
        store_status: StoreStatusStore | None = None,
    ) -> None:
        self.api = api
        self.cart = cart
        self.customer = customer
        self.realtime = realtime
        self.store_status = store_status

    def prefill(self) -> CheckoutForm:
        info = self.customer.info
        return CheckoutForm(
            customer_name=info.name,
            customer_phone=info.phone,
            delivery_address=info.address,
            landmark=info.landmark,
        )

    def validate(self, form: CheckoutForm) -> None:
        if self.store_status is not None and not self.store_status.is_open:
            raise CheckoutError(self.store_status.closed_message)
        if self.cart.count() == 0:
            raise CheckoutError(EMPTY_CART_MESSAGE)
        if not form.customer_name or not form.customer_phone:
            raise CheckoutError(MISSING_CONTACT_MESSAGE)
        if not form.is_pickup:
            if not form.delivery_address:
                raise CheckoutError(MISSING_ADDRESS_MESSAGE)
            if not form.landmark:
                raise CheckoutError(MISSING_LANDMARK_MESSAGE)

    def submit(self, form: CheckoutForm, line_user_id: str | None = None) -> dict[str, Any]:
        """Create the order; the cart is cleared only once the server accepted it."""
        self.validate(form)
        payload = build_order_request(self.cart.items, form, line_user_id)
        try:
            order = self.api.create_order(payload)
        except ApiError as exc:
            logger.warning("order submission failed: %s", exc)
            raise CheckoutError(_user_message(exc, "order_create"), exc.status_code) from exc

        self.cart.clear()
        self.customer.update_info(
            name=form.customer_name,
            phone=form.customer_phone,
            address=form.delivery_address,
            landmark=form.landmark,
        )
        if self.realtime is not None:
            self.realtime.join(order_room(order["id"]))
        logger.info("order %s submitted", order["id"])
        return order

    def upload_slip(
        self,
        order_id: str,
        content: bytes,
        content_type: str,
        filename: str = "slip",
    ) -> dict[str, Any]:
        try:
            response = self.api.upload_slip(order_id, content, content_type, filename)
        except ApiError as exc:
            logger.warning("slip upload for %s failed: %s", order_id, exc)
            raise CheckoutError(_user_message(exc, "upload_slip"), exc.status_code) from exc
        return response["order"]


def _user_message(error: ApiError, fallback_key: str) -> str:
    if error.is_network_error:
        return ERROR_MESSAGES["network"]
    if error.status_code is not None and error.status_code >= 500 or not error.message:
        return ERROR_MESSAGES[fallback_key]
    return error.message
