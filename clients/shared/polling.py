"""Periodic refresh loop that reconciles client state with the API."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from clients.shared.config import client_settings

logger = logging.getLogger(__name__)


class RefreshLoop:
    def __init__(
        self,
        refresh: Callable[[], object],
        interval_s: float | None = None,
        name: str = "refresh-loop",
    ) -> None:
        self.refresh = refresh
        self.interval_s = (
            interval_s if interval_s is not None else client_settings.order_refresh_interval_s
        )
        if self.interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self.name = name
        self.failures = 0
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> bool:
        try:
            self.refresh()
        except Exception:
            self.failures += 1
            logger.exception("%s refresh failed", self.name)
            return False
        return True

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout_s: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout_s)
            self._thread = None

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(self.interval_s)
