"""Client-side cart that survives restarts.

Every add creates a separate line, so the item count is the number of lines
and the total is the plain sum of their unit prices. The cart is discarded
once it has been idle for longer than the configured expiry window.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Callable

from pydantic import ValidationError

from clients.shared.config import CART_STORAGE_KEY, client_settings
from clients.shared.storage import SafeStorage
from clients.storefront.models import CartGroup, CartItem, ProductSnapshot, sum_prices

logger = logging.getLogger(__name__)


def _group_key(item: CartItem) -> str:
    return item.product.id + json.dumps(item.selected_options, sort_keys=True, ensure_ascii=False)


class CartStore:
    def __init__(
        self,
        storage: SafeStorage,
        expiry_hours: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self.expiry_hours = (
            expiry_hours if expiry_hours is not None else client_settings.cart_expiry_hours
        )
        self._clock = clock
        self._items: list[CartItem] = []
        self.last_updated: float | None = None
        self.load()

    @property
    def items(self) -> list[CartItem]:
        self.check_and_clear_expired()
        return list(self._items)

    def load(self) -> None:
        saved = self.storage.get(CART_STORAGE_KEY)
        self._items = []
        self.last_updated = None
        if isinstance(saved, dict):
            try:
                self._items = [CartItem.model_validate(raw) for raw in saved.get("items") or []]
            except ValidationError as exc:
                logger.warning("discarding unreadable saved cart: %s", exc)
                self._items = []
            last_updated_ms = saved.get("lastUpdated")
            if isinstance(last_updated_ms, (int, float)):
                self.last_updated = last_updated_ms / 1000
        self.check_and_clear_expired()

    def add_item(self, product: ProductSnapshot, options: dict[str, str] | None = None) -> CartItem:
        item = CartItem(id=uuid.uuid4().hex, product=product, selected_options=dict(options or {}))
        self._items.append(item)
        self._persist()
        return item

    def remove_item(self, item_id: str) -> None:
        self._items = [item for item in self._items if item.id != item_id]
        self._persist()

    def update_item_note(self, item_id: str, note: str) -> None:
        self._items = [
            item.model_copy(update={"note": note}) if item.id == item_id else item
            for item in self._items
        ]
        self._persist()

    def clear(self) -> None:
        self._items = []
        self._persist()

    def total(self) -> float:
        return float(sum_prices(item.product.price for item in self.items))

    def count(self) -> int:
        return len(self.items)

    def grouped_items(self) -> list[CartGroup]:
        groups: dict[str, CartGroup] = {}
        for item in self.items:
            key = _group_key(item)
            if key in groups:
                groups[key].items.append(item)
            else:
                groups[key] = CartGroup(
                    product=item.product,
                    selected_options=item.selected_options,
                    items=[item],
                )
        return list(groups.values())

    def check_and_clear_expired(self) -> bool:
        if not self._items or self.last_updated is None:
            return False
        idle_s = self._clock() - self.last_updated
        if idle_s <= self.expiry_hours * 3600:
            return False
        logger.info("cart expired after %.0f idle seconds", idle_s)
        self.clear()
        return True

    def _persist(self) -> None:
        self.last_updated = self._clock()
        self.storage.set(
            CART_STORAGE_KEY,
            {
                "items": [item.model_dump(mode="json", by_alias=True) for item in self._items],
                "lastUpdated": int(self.last_updated * 1000),
            },
        )
