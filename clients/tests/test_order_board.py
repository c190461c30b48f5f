import threading

import pytest

from clients.pos.order_board import BoardActionError, OrderBoard, describe_order
from clients.shared.config import ERROR_MESSAGES, POS_SOUND_STORAGE_KEY
from clients.shared.realtime import RealtimeClient


@pytest.fixture
def realtime(connector):
    client = RealtimeClient("ws://api.test/ws", connect=connector, sleep=lambda _s: None)
    client.connect()
    return client


def test_refresh_replaces_orders_and_fills_buckets(api, server):
    server.add_order(status="pending")
    server.add_order(status="cooking")
    server.add_order(status="delivered")
    server.add_order(status="cancelled")
    board = OrderBoard(api)

    assert board.refresh() is True

    buckets = board.buckets()
    assert {name: len(orders) for name, orders in buckets.items()} == {
        "new": 1,
        "active": 1,
        "done": 1,
        "cancelled": 1,
    }


def test_advance_walks_order_to_completion(api, server):
    order = server.add_order()
    board = OrderBoard(api)
    board.refresh()

    statuses = []
    while (updated := board.advance(order["id"])) is not None:
        statuses.append(updated["status"])

    assert statuses == ["confirmed", "cooking", "ready", "delivered", "completed"]
    assert board.get(order["id"])["status"] == "completed"
    assert [row["status"] for row in server.history[order["id"]]][-1] == "completed"


def test_cancel_only_for_open_orders(api, server):
    open_order = server.add_order(status="ready")
    done = server.add_order(status="completed")
    board = OrderBoard(api)
    board.refresh()

    assert board.cancel(open_order["id"])["status"] == "cancelled"
    assert board.cancel(done["id"]) is None


def test_failed_status_update_raises_with_message(api, server):
    order = server.add_order()
    board = OrderBoard(api)
    board.refresh()
    server.fail_with = 500

    with pytest.raises(BoardActionError) as exc_info:
        board.advance(order["id"])

    assert exc_info.value.message == ERROR_MESSAGES["status_update"]
    assert board.get(order["id"])["status"] == "pending"


def test_refresh_failure_sets_error(api, server):
    server.network_down = True
    board = OrderBoard(api)

    assert board.refresh() is False
    assert board.error == ERROR_MESSAGES["order_load"]


def test_connect_joins_admin_room_and_applies_pushes(api, server, realtime, connector):
    board = OrderBoard(api, realtime)
    board.connect("admin-jwt")
    assert connector.latest.sent == [{"action": "join", "room": "admin", "token": "admin-jwt"}]

    order = server.add_order()
    realtime.dispatch({"event": "new_order", "data": order})
    realtime.dispatch({"event": "new_order", "data": order})
    assert [o["id"] for o in board.orders] == [order["id"]]
    assert board.pending_alert is True

    board.acknowledge_alert()
    assert board.pending_alert is False

    realtime.dispatch(
        {
            "event": "order_updated",
            "data": {**order, "status": "cooking", "updated_at": "2026-10-19T12:00:00+00:00"},
        }
    )
    assert board.get(order["id"])["status"] == "cooking"

    board.disconnect()
    realtime.dispatch({"event": "new_order", "data": server.add_order()})
    assert len(board.orders) == 1


def test_connect_without_realtime_is_an_error(api):
    with pytest.raises(RuntimeError):
        OrderBoard(api).connect("jwt")


def test_sound_preference_persists(api, storage):
    board = OrderBoard(api, storage=storage)
    assert board.sound_enabled is True

    board.set_sound_enabled(False)

    assert storage.get(POS_SOUND_STORAGE_KEY) is False
    assert OrderBoard(api, storage=storage).sound_enabled is False


def test_polling_refreshes_in_background(api, server):
    server.add_order()
    board = OrderBoard(api, refresh_interval_s=0.01)
    refreshed = threading.Event()
    original_refresh = board.refresh

    def tracking_refresh(status=None):
        result = original_refresh(status)
        refreshed.set()
        return result

    board.refresh = tracking_refresh
    board.start_polling()
    try:
        assert refreshed.wait(2)
    finally:
        board.stop_polling()

    assert len(board.orders) == 1


def test_describe_order_labels_card_and_offers_forward_action():
    card = describe_order(
        {
            "id": "TP1",
            "status": "cooking",
            "delivery_type": "free-delivery",
            "payment_method": "promptpay",
            "payment_status": "paid",
            "customer_phone": "0812345678",
        }
    )

    assert card == {
        "status": "กำลังทำ",
        "delivery": "จัดส่งฟรี",
        "payment_method": "พร้อมเพย์",
        "payment_status": "ชำระแล้ว",
        "phone": "081-234-5678",
        "next_action": "พร้อมส่ง/รับ",
    }
    assert describe_order({"id": "TP2", "status": "completed"})["next_action"] is None
