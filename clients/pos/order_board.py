"""Live order board for the POS dashboard.

The board holds the latest known copy of recent orders. A full refresh over
REST replaces everything; pushed `new_order` / `order_updated` events patch
single orders in between refreshes.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from app.models.order import OrderStatus
from app.services.state_machine import can_cancel, next_status, status_bucket
from clients.shared.api import ApiClient, ApiError
from clients.shared.config import (
    DELIVERY_TYPE_LABELS,
    ERROR_MESSAGES,
    ORDER_STATUS_LABELS,
    PAYMENT_METHOD_LABELS,
    PAYMENT_STATUS_LABELS,
    POS_SOUND_STORAGE_KEY,
    client_settings,
    format_phone_number,
)
from clients.shared.polling import RefreshLoop
from clients.shared.realtime import ADMIN_ROOM, RealtimeClient
from clients.shared.state import apply_status_update, is_stale
from clients.shared.storage import SafeStorage

logger = logging.getLogger(__name__)

NEW_ORDER = "new_order"
ORDER_UPDATED = "order_updated"

BUCKET_NAMES = ("new", "active", "done", "cancelled")


class BoardActionError(Exception):
    def __init__(self, message: str, order_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.order_id = order_id


def _known_status(order: dict[str, Any]) -> OrderStatus | None:
    try:
        return OrderStatus(order.get("status"))
    except ValueError:
        logger.warning("order %s has unknown status %r", order.get("id"), order.get("status"))
        return None


def _label(labels: dict[str, str], value: str | None) -> str | None:
    return labels.get(value, value) if value is not None else None


def describe_order(order: dict[str, Any]) -> dict[str, str | None]:
    """Thai labels for an order card, plus the label of the forward action if any."""
    status = _known_status(order)
    target = next_status(status) if status is not None else None
    return {
        "status": _label(ORDER_STATUS_LABELS, order.get("status")),
        "delivery": _label(DELIVERY_TYPE_LABELS, order.get("delivery_type")),
        "payment_method": _label(PAYMENT_METHOD_LABELS, order.get("payment_method")),
        "payment_status": _label(PAYMENT_STATUS_LABELS, order.get("payment_status")),
        "phone": format_phone_number(order.get("customer_phone") or ""),
        "next_action": ORDER_STATUS_LABELS[target.value] if target is not None else None,
    }


class OrderBoard:
    def __init__(
        self,
        api: ApiClient,
        realtime: RealtimeClient | None = None,
        storage: SafeStorage | None = None,
        refresh_interval_s: float | None = None,
    ) -> None:
        self.api = api
        self.realtime = realtime
        self.storage = storage
        self.refresh_interval_s = (
            refresh_interval_s
            if refresh_interval_s is not None
            else client_settings.order_refresh_interval_s
        )
        self.pending_alert = False
        self.error: str | None = None
        self._orders: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._unsubscribers: list = []
        self._poller: RefreshLoop | None = None

    @property
    def orders(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._orders)

    def get(self, order_id: str) -> dict[str, Any] | None:
        with self._lock:
            return next((order for order in self._orders if order["id"] == order_id), None)

    # Sound preference

    @property
    def sound_enabled(self) -> bool:
        if self.storage is None:
            return True
        return bool(self.storage.get(POS_SOUND_STORAGE_KEY, True))

    def set_sound_enabled(self, enabled: bool) -> None:
        if self.storage is not None:
            self.storage.set(POS_SOUND_STORAGE_KEY, enabled)

    # Authoritative state

    def refresh(self, status: str | None = None) -> bool:
        try:
            orders = self.api.list_orders(status=status)
        except ApiError as exc:
            self.error = ERROR_MESSAGES["order_load"]
            logger.warning("order board refresh failed: %s", exc)
            return False
        with self._lock:
            self._orders = list(orders)
        self.error = None
        return True

    def buckets(self) -> dict[str, list[dict[str, Any]]]:
        grouped: dict[str, list[dict[str, Any]]] = {name: [] for name in BUCKET_NAMES}
        for order in self.orders:
            status = _known_status(order)
            if status is not None:
                grouped[status_bucket(status)].append(order)
        return grouped

    # Staff actions

    def advance(self, order_id: str) -> dict[str, Any] | None:
        """Move an order one step along the flow; `None` when it cannot move."""
        order = self.get(order_id)
        if order is None:
            raise BoardActionError(ERROR_MESSAGES["order_load"], order_id)
        status = _known_status(order)
        target = next_status(status) if status is not None else None
        if target is None:
            return None
        return self._set_status(order_id, target.value)

    def cancel(self, order_id: str) -> dict[str, Any] | None:
        order = self.get(order_id)
        if order is None:
            raise BoardActionError(ERROR_MESSAGES["order_load"], order_id)
        status = _known_status(order)
        if status is None or not can_cancel(status):
            return None
        return self._set_status(order_id, OrderStatus.CANCELLED.value)

    def _set_status(self, order_id: str, status: str) -> dict[str, Any]:
        try:
            updated = self.api.update_order_status(order_id, status)
        except ApiError as exc:
            logger.warning("status update of %s to %s failed: %s", order_id, status, exc)
            raise BoardActionError(ERROR_MESSAGES["status_update"], order_id) from exc
        self.apply_order_updated(updated)
        return updated

    # Pushed events

    def apply_new_order(self, order: dict[str, Any]) -> None:
        with self._lock:
            if any(existing["id"] == order["id"] for existing in self._orders):
                return
            self._orders.insert(0, order)
        self.pending_alert = True
        logger.info("new order %s on board", order["id"])

    def apply_order_updated(self, order: dict[str, Any]) -> None:
        with self._lock:
            for index, existing in enumerate(self._orders):
                if existing["id"] == order["id"]:
                    if not is_stale(existing, order):
                        self._orders[index] = apply_status_update(existing, order)
                    return
            self._orders.insert(0, order)

    def acknowledge_alert(self) -> None:
        self.pending_alert = False

    def connect(self, token: str) -> None:
        if self.realtime is None:
            raise RuntimeError("OrderBoard has no realtime client")
        if not self._unsubscribers:
            self._unsubscribers = [
                self.realtime.on(NEW_ORDER, self.apply_new_order),
                self.realtime.on(ORDER_UPDATED, self.apply_order_updated),
            ]
        self.realtime.join(ADMIN_ROOM, token)

    def disconnect(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        if self.realtime is not None:
            self.realtime.leave(ADMIN_ROOM)

    # Polling fallback

    def start_polling(self) -> RefreshLoop:
        if self._poller is None:
            self._poller = RefreshLoop(self.refresh, self.refresh_interval_s, name="order-board")
        self._poller.start()
        return self._poller

    def stop_polling(self) -> None:
        if self._poller is not None:
            self._poller.stop()
