from clients.shared.api import ApiError
from clients.shared.realtime import RealtimeClient
from clients.storefront.order_tracker import OrderTracker


def _realtime(connector) -> RealtimeClient:
    client = RealtimeClient("ws://api.test/ws", connect=connector, sleep=lambda _s: None)
    client.connect()
    return client


def test_start_joins_room_and_loads_order(api, server, connector):
    order = server.add_order()
    realtime = _realtime(connector)
    seen = []

    tracker = OrderTracker(api, realtime, order["id"], on_change=seen.append)
    tracker.start()

    assert connector.latest.sent == [{"action": "join", "room": f"order_{order['id']}"}]
    assert tracker.status == "pending"
    assert tracker.status_label == "รอยืนยัน"
    assert [row["status"] for row in tracker.history] == ["pending"]
    assert len(seen) == 1


def test_pushed_updates_apply_only_to_tracked_order(api, server, connector):
    order = server.add_order()
    realtime = _realtime(connector)
    tracker = OrderTracker(api, realtime, order["id"])
    tracker.start()

    realtime.dispatch({"event": "order_status_updated", "data": {**order, "status": "cooking", "updated_at": "2026-10-19T10:05:00+00:00"}})
    realtime.dispatch({"event": "order_status_updated", "data": {"id": "TP-other", "status": "cancelled"}})

    assert tracker.status == "cooking"
    assert tracker.status_label == "กำลังทำ"


def test_stale_push_does_not_regress_status(api, server, connector):
    order = server.add_order()
    tracker = OrderTracker(api, _realtime(connector), order["id"])
    tracker.start()
    tracker.handle_status_update({**order, "status": "ready", "updated_at": "2026-10-19T11:00:00+00:00"})

    tracker.handle_status_update({**order, "status": "cooking", "updated_at": "2026-10-19T10:30:00+00:00"})

    assert tracker.status == "ready"


def test_refresh_is_authoritative_after_missed_events(api, server, connector):
    order = server.add_order()
    tracker = OrderTracker(api, _realtime(connector), order["id"])
    tracker.start()

    api.update_order_status(order["id"], "confirmed")
    api.update_order_status(order["id"], "cooking")
    assert tracker.status == "pending"

    assert tracker.refresh() is True
    assert tracker.status == "cooking"
    assert [row["status"] for row in tracker.history] == ["pending", "confirmed", "cooking"]


def test_refresh_failure_keeps_last_known_state(api, server):
    order = server.add_order()
    tracker = OrderTracker(api, None, order["id"])
    tracker.start()

    server.fail_with = 503
    assert tracker.refresh() is False
    assert isinstance(tracker.error, ApiError)
    assert tracker.status == "pending"


def test_stop_leaves_room_and_ignores_later_events(api, server, connector):
    order = server.add_order()
    realtime = _realtime(connector)
    tracker = OrderTracker(api, realtime, order["id"])
    tracker.start()

    tracker.stop()
    realtime.dispatch({"event": "order_status_updated", "data": {**order, "status": "ready"}})

    assert connector.latest.sent[-1] == {"action": "leave", "room": f"order_{order['id']}"}
    assert tracker.status == "pending"
