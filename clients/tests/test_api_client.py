import httpx
import pytest

from clients.shared.api import ApiClient, ApiError
from clients.shared.config import ERROR_MESSAGES


def test_requests_carry_bearer_token(api, server):
    server.add_order()

    orders = api.list_orders(status="pending", limit=5)

    assert len(orders) == 1
    request = server.requests[-1]
    assert request.headers["Authorization"] == "Bearer admin-token"
    assert request.url.params["status"] == "pending"
    assert request.url.params["limit"] == "5"


def test_order_round_trip(api, server):
    created = api.create_order(
        {
            "customer_name": "A",
            "customer_phone": "1",
            "items": [{"productId": "p1", "productName": "Tea", "price": 25}],
            "total_amount": 25,
            "payment_method": "cash",
        }
    )

    assert api.get_order(created["id"])["id"] == created["id"]
    updated = api.update_order_status(created["id"], "confirmed")
    assert updated["status"] == "confirmed"
    assert [row["status"] for row in api.get_order_history(created["id"])] == [
        "pending",
        "confirmed",
    ]
    assert api.update_payment_status(created["id"], "confirmed")["payment_status"] == "confirmed"


def test_upload_slip_sends_multipart_field(api, server):
    order = server.add_order(payment_method="promptpay")

    response = api.upload_slip(order["id"], b"\x89PNG", "image/png", "slip.png")

    assert response["order"]["payment_status"] == "paid"
    request = server.requests[-1]
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="slip"' in request.content


def test_store_status_calls(api):
    assert api.get_store_status()["isOpen"] is True

    result = api.set_store_status(False, "ปิดวันนี้")

    assert result == {"success": True, "isOpen": False, "message": "ปิดวันนี้", "closeTime": None}
    assert api.get_store_status()["message"] == "ปิดวันนี้"


def test_error_response_raises_api_error_with_server_message(api):
    with pytest.raises(ApiError) as exc_info:
        api.get_order("TP404")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Order not found"
    assert not exc_info.value.is_network_error


def test_non_json_error_body_falls_back_to_status_code():
    transport = httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway"))
    with ApiClient("http://api.test", timeout_s=1, transport=transport) as client:
        with pytest.raises(ApiError) as exc_info:
            client.get_store_status()

    assert exc_info.value.message == "HTTP 502"


def test_transport_failure_is_network_error(api, server):
    server.network_down = True

    with pytest.raises(ApiError) as exc_info:
        api.get_user_orders("U1")

    assert exc_info.value.status_code is None
    assert exc_info.value.message == ERROR_MESSAGES["network"]


def test_create_order_rejected_by_request_contract(api):
    with pytest.raises(ApiError) as exc_info:
        api.create_order({"customer_name": "A", "customer_phone": "1", "items": []})

    assert exc_info.value.status_code == 422
    assert exc_info.value.message == "Validation failed"
