"""Room-scoped fan-out of order and store events to WebSocket subscribers.

Delivery is best effort: each emission is sent at most once to every
subscriber connected at that moment and is never replayed. Clients reconcile
by re-fetching over REST.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

from app.observability import log_event, metrics_store

ADMIN_ROOM = "admin"
STORE_STATUS_ROOM = "store_status"
ORDER_ROOM_PREFIX = "order_"

NEW_ORDER = "new_order"
ORDER_UPDATED = "order_updated"
ORDER_STATUS_UPDATED = "order_status_updated"
STORE_STATUS_CHANGED = "store_status_changed"


def order_room(order_id: str) -> str:
    return f"{ORDER_ROOM_PREFIX}{order_id}"


def is_known_room(room: str) -> bool:
    if room in {ADMIN_ROOM, STORE_STATUS_ROOM}:
        return True
    return room.startswith(ORDER_ROOM_PREFIX) and len(room) > len(ORDER_ROOM_PREFIX)


class RoomBroadcaster:
    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)
        self._connections: set[WebSocket] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def unbind_loop(self) -> None:
        self._loop = None

    def connect(self, websocket: WebSocket) -> None:
        self._connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        for room in list(self._rooms):
            members = self._rooms[room]
            members.discard(websocket)
            if not members:
                del self._rooms[room]

    def join(self, websocket: WebSocket, room: str) -> None:
        self._rooms[room].add(websocket)

    def leave(self, websocket: WebSocket, room: str) -> None:
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(websocket)
        if not members:
            del self._rooms[room]

    def room_size(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    def room_sizes(self) -> dict[str, int]:
        return {room: len(members) for room, members in self._rooms.items()}

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def reset(self) -> None:
        self._rooms.clear()
        self._connections.clear()

    async def emit(self, room: str, event: str, data: dict[str, Any]) -> int:
        message = {"event": event, "room": room, "data": data}
        delivered = 0
        for websocket in list(self._rooms.get(room, ())):
            try:
                await websocket.send_json(message)
            except Exception as exc:  # a dead socket must not block the other subscribers
                metrics_store.increment("broadcast_send_failures_total")
                log_event(
                    f"broadcast_send_failed:{type(exc).__name__}",
                    room=room,
                    level=logging.WARNING,
                )
                self.disconnect(websocket)
                continue
            delivered += 1
        metrics_store.increment("broadcast_events_total")
        return delivered

    def publish(self, room: str, event: str, data: dict[str, Any]) -> None:
        """Schedule an emission from any thread; dropped when no loop is bound."""
        loop = self._loop
        if loop is None or loop.is_closed():
            log_event(f"broadcast_dropped:{event}", room=room, level=logging.WARNING)
            return
        asyncio.run_coroutine_threadsafe(self.emit(room, event, data), loop)


broadcaster = RoomBroadcaster()
