import json
import logging

from app.observability import (
    JsonFormatter,
    MetricsStore,
    log_event,
    metrics_store,
    observe_timing,
    record_order_status,
    set_request_id,
)


def test_metrics_store_snapshot_and_reset():
    store = MetricsStore()
    store.increment("orders_created_total")
    store.increment("orders_created_total", 2)
    store.observe("order_create_seconds", 0.2)
    store.observe("order_create_seconds", 0.4)

    snapshot = store.snapshot()
    assert snapshot.counters == {"orders_created_total": 3}
    assert snapshot.timings["order_create_seconds"]["count"] == 2.0
    assert snapshot.timings["order_create_seconds"]["max_s"] == 0.4

    store.reset()
    assert store.snapshot().counters == {}


def test_observe_timing_records_into_global_store():
    with observe_timing("block_seconds"):
        pass

    assert metrics_store.snapshot().timings["block_seconds"]["count"] == 1.0


def test_json_formatter_includes_order_context_and_request_id():
    set_request_id("req-42")
    record = logging.LogRecord("tumpanich.ordering", logging.INFO, __file__, 1, "order_created", None, None)
    record.order_id = "TP1"
    record.room = "admin"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "order_created"
    assert payload["request_id"] == "req-42"
    assert payload["order_id"] == "TP1"
    assert payload["room"] == "admin"
    assert payload["level"] == "INFO"
    assert payload["status"] is None


def test_record_order_status_counts_per_status():
    record_order_status("pending")
    record_order_status("pending")
    record_order_status("cooking")

    counters = metrics_store.snapshot().counters
    assert counters["orders_status_pending_total"] == 2
    assert counters["orders_status_cooking_total"] == 1


def test_log_event_carries_status_and_exception(caplog):
    try:
        raise OSError("disk full")
    except OSError as exc:
        error = exc

    with caplog.at_level(logging.ERROR, logger="tumpanich.ordering"):
        log_event(
            "unhandled_error:OSError",
            order_id="TP1",
            status="paid",
            level=logging.ERROR,
            exc_info=error,
        )

    record = caplog.records[-1]
    assert record.status == "paid"
    assert record.order_id == "TP1"
    payload = json.loads(JsonFormatter().format(record))
    assert "disk full" in payload["exc_info"]
