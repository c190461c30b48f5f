import json
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.auth.dependencies import authenticate_token
from app.auth.jwt import JwtError
from app.config import admin_roles_list
from app.observability import log_event
from app.services.broadcast import (
    ADMIN_ROOM,
    STORE_STATUS_ROOM,
    broadcaster,
    is_known_room,
    order_room,
)

router = APIRouter(tags=["realtime"])


class JoinRejected(Exception):
    pass


def _resolve_room(message: dict[str, Any]) -> str:
    action = message.get("action")
    if action == "join_order":
        order_id = message.get("order_id")
        if not isinstance(order_id, str) or not order_id:
            raise JoinRejected("order_id is required")
        return order_room(order_id)
    if action == "join_admin":
        return ADMIN_ROOM
    if action == "join_store_status":
        return STORE_STATUS_ROOM

    room = message.get("room")
    if not isinstance(room, str) or not is_known_room(room):
        raise JoinRejected("Unknown room")
    return room


def _authorize_room(room: str, token: Any) -> None:
    if room != ADMIN_ROOM:
        return
    if not isinstance(token, str) or not token:
        raise JoinRejected("Admin room requires a bearer token")
    try:
        auth = authenticate_token(token)
    except JwtError as err:
        raise JoinRejected("Invalid or expired token") from err
    if auth.role not in admin_roles_list():
        raise JoinRejected("Insufficient role")


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": "error", "data": {"message": message}})


async def _handle_message(websocket: WebSocket, raw: str) -> None:
    try:
        message = json.loads(raw)
    except ValueError:
        await _send_error(websocket, "Malformed message")
        return
    if not isinstance(message, dict):
        await _send_error(websocket, "Malformed message")
        return

    action = message.get("action")
    if action == "ping":
        await websocket.send_json({"event": "pong", "data": {}})
        return

    if action in {"join", "join_order", "join_admin", "join_store_status"}:
        try:
            room = _resolve_room(message)
            _authorize_room(room, message.get("token"))
        except JoinRejected as err:
            await _send_error(websocket, str(err))
            return
        broadcaster.join(websocket, room)
        log_event("realtime_room_joined", room=room)
        await websocket.send_json({"event": "joined", "room": room, "data": {"room": room}})
        return

    if action == "leave":
        room = message.get("room")
        if isinstance(room, str):
            broadcaster.leave(websocket, room)
            await websocket.send_json({"event": "left", "room": room, "data": {"room": room}})
        return

    await _send_error(websocket, f"Unknown action: {action}")


@router.websocket("/ws")
async def realtime_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    broadcaster.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            await _handle_message(websocket, raw)
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)
