"""Subscriber side of the room broadcast channel.

Joins are fire-and-forget: the server acknowledges them, but nothing waits for
the acknowledgement. Rooms are remembered and re-joined after every
reconnect; events emitted while disconnected are lost, so callers pair this
client with a REST refresh (see `clients.shared.polling`).
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections import defaultdict
from typing import Any, Callable

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import connect as websockets_connect

from clients.shared.config import client_settings

logger = logging.getLogger(__name__)

ADMIN_ROOM = "admin"
STORE_STATUS_ROOM = "store_status"

EventHandler = Callable[[dict[str, Any]], None]


def order_room(order_id: str) -> str:
    return f"order_{order_id}"


class RealtimeClient:
    def __init__(
        self,
        url: str | None = None,
        connect: Callable[[str], Any] = websockets_connect,
        reconnect_attempts: int | None = None,
        reconnect_delay_s: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.url = url or client_settings.ws_url
        self._connect = connect
        self.reconnect_attempts = (
            reconnect_attempts
            if reconnect_attempts is not None
            else client_settings.socket_reconnect_attempts
        )
        self.reconnect_delay_s = (
            reconnect_delay_s
            if reconnect_delay_s is not None
            else client_settings.socket_reconnect_delay_s
        )
        self._sleep = sleep
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._rooms: dict[str, str | None] = {}
        self._connection: Any = None
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._connection is not None

    @property
    def rooms(self) -> list[str]:
        return list(self._rooms)

    def on(self, event: str, handler: EventHandler) -> Callable[[], None]:
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def connect(self) -> None:
        """Open the socket, retrying with a fixed delay, and re-join known rooms."""
        last_error: Exception | None = None
        for attempt in range(self.reconnect_attempts + 1):
            if attempt:
                self._sleep(self.reconnect_delay_s)
            try:
                connection = self._connect(self.url)
            except (OSError, WebSocketException) as exc:
                last_error = exc
                logger.warning("realtime connect attempt %s failed: %s", attempt + 1, exc)
                continue
            with self._lock:
                self._connection = connection
            for room, token in list(self._rooms.items()):
                self._send(_join_message(room, token))
            logger.info("realtime connected to %s", self.url)
            return
        raise ConnectionError(f"Could not connect to {self.url}") from last_error

    def join(self, room: str, token: str | None = None) -> None:
        self._rooms[room] = token
        if self.connected:
            self._send(_join_message(room, token))

    def leave(self, room: str) -> None:
        self._rooms.pop(room, None)
        if self.connected:
            self._send({"action": "leave", "room": room})

    def dispatch(self, message: dict[str, Any] | str) -> None:
        if isinstance(message, str):
            try:
                message = json.loads(message)
            except ValueError:
                logger.warning("realtime dropped malformed message")
                return
        event = message.get("event")
        if event == "error":
            logger.warning("realtime server error: %s", message.get("data"))
        data = message.get("data") or {}
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(data)
            except Exception:
                logger.exception("realtime handler for %s failed", event)

    def run(self, stop_event: threading.Event, poll_timeout_s: float = 0.5) -> None:
        """Read and dispatch events until `stop_event` is set or reconnects run out."""
        while not stop_event.is_set():
            if not self.connected:
                try:
                    self.connect()
                except ConnectionError:
                    logger.error("realtime giving up after %s attempts", self.reconnect_attempts + 1)
                    return
            with self._lock:
                connection = self._connection
            if connection is None:
                continue
            try:
                raw = connection.recv(timeout=poll_timeout_s)
            except TimeoutError:
                continue
            except (ConnectionClosed, OSError) as exc:
                logger.warning("realtime connection lost: %s", exc)
                self._drop_connection()
                continue
            self.dispatch(raw)

    def close(self) -> None:
        self._rooms.clear()
        self._drop_connection()

    def _send(self, message: dict[str, Any]) -> None:
        connection = self._connection
        if connection is None:
            return
        try:
            connection.send(json.dumps(message))
        except (ConnectionClosed, OSError) as exc:
            logger.warning("realtime send failed: %s", exc)
            self._drop_connection()

    def _drop_connection(self) -> None:
        with self._lock:
            connection, self._connection = self._connection, None
        if connection is not None:
            try:
                connection.close()
            except (ConnectionClosed, OSError) as exc:
                logger.debug("realtime close failed: %s", exc)


def _join_message(room: str, token: str | None) -> dict[str, Any]:
    message: dict[str, Any] = {"action": "join", "room": room}
    if token:
        message["token"] = token
    return message
