from __future__ import annotations

import logging
from typing import Any, Callable

from clients.shared.api import ApiClient, ApiError
from clients.shared.realtime import STORE_STATUS_ROOM, RealtimeClient

logger = logging.getLogger(__name__)

STORE_STATUS_CHANGED = "store_status_changed"
STORE_CLOSED_MESSAGE = "ขออภัย ร้านปิดให้บริการในขณะนี้"


class StoreStatusStore:
    """Open/closed state of the shop, fetched once and then kept current by pushes.

    Until the first successful fetch the shop is assumed open; the server
    still has the final say when the order is created.
    """

    def __init__(self, api: ApiClient, realtime: RealtimeClient | None = None) -> None:
        self.api = api
        self.realtime = realtime
        self.is_open = True
        self.message = ""
        self.close_time: str | None = None
        self.error: ApiError | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def closed_message(self) -> str:
        return self.message or STORE_CLOSED_MESSAGE

    def start(self) -> None:
        self.refresh()
        if self.realtime is not None and self._unsubscribe is None:
            self._unsubscribe = self.realtime.on(STORE_STATUS_CHANGED, self.apply)
            self.realtime.join(STORE_STATUS_ROOM)

    def refresh(self) -> bool:
        try:
            status = self.api.get_store_status()
        except ApiError as exc:
            self.error = exc
            logger.warning("store status refresh failed: %s", exc)
            return False
        self.error = None
        self.apply(status)
        return True

    def apply(self, payload: dict[str, Any]) -> None:
        self.is_open = bool(payload.get("isOpen", True))
        self.message = payload.get("message") or ""
        self.close_time = payload.get("closeTime")
        logger.info("store is %s", "open" if self.is_open else "closed")

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.realtime is not None:
            self.realtime.leave(STORE_STATUS_ROOM)
