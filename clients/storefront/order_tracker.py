from __future__ import annotations

import logging
from typing import Any, Callable

from clients.shared.api import ApiClient, ApiError
from clients.shared.config import ORDER_STATUS_LABELS
from clients.shared.realtime import RealtimeClient, order_room
from clients.shared.state import apply_status_update

logger = logging.getLogger(__name__)

ORDER_STATUS_UPDATED = "order_status_updated"


class OrderTracker:
    """Follows one order: pushed updates when connected, REST as the source of truth."""

    def __init__(
        self,
        api: ApiClient,
        realtime: RealtimeClient | None,
        order_id: str,
        on_change: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        self.api = api
        self.realtime = realtime
        self.order_id = order_id
        self.on_change = on_change
        self.order: dict[str, Any] | None = None
        self.history: list[dict[str, Any]] = []
        self.error: ApiError | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def status(self) -> str | None:
        return self.order["status"] if self.order else None

    @property
    def status_label(self) -> str | None:
        status = self.status
        return ORDER_STATUS_LABELS.get(status, status) if status is not None else None

    def start(self) -> None:
        if self.realtime is not None and self._unsubscribe is None:
            self._unsubscribe = self.realtime.on(ORDER_STATUS_UPDATED, self.handle_status_update)
            self.realtime.join(order_room(self.order_id))
        self.refresh()

    def refresh(self) -> bool:
        try:
            order = self.api.get_order(self.order_id)
            history = self.api.get_order_history(self.order_id)
        except ApiError as exc:
            self.error = exc
            logger.warning("refresh of order %s failed: %s", self.order_id, exc)
            return False
        self.error = None
        self.order = order
        self.history = history
        self._notify()
        return True

    def handle_status_update(self, payload: dict[str, Any]) -> None:
        if payload.get("id") != self.order_id:
            return
        self.order = apply_status_update(self.order, payload)
        self._notify()

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.realtime is not None:
            self.realtime.leave(order_room(self.order_id))

    def _notify(self) -> None:
        if self.on_change is not None and self.order is not None:
            self.on_change(self.order)
