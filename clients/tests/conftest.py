import json
import queue
import re
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from pydantic import ValidationError

from app.schemas.order import OrderCreate
from app.services.errors import OrderValidationError
from app.services.orders_service import validate_order_payload
from clients.shared.api import ApiClient
from clients.shared.storage import MemoryBackend, SafeStorage

_ORDER_PATH = re.compile(r"^/api/orders/(?P<order_id>[^/]+)(?P<rest>/[a-z]+)?$")


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeOrderServer:
    """In-memory stand-in for the ordering API behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.orders: dict[str, dict] = {}
        self.history: dict[str, list[dict]] = {}
        self.store_status = {"isOpen": True, "message": "", "closeTime": None}
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None
        self.network_down = False
        self._sequence = 0
        self._clock = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)

    def _tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def add_order(self, status: str = "pending", **fields) -> dict:
        self._sequence += 1
        now = self._tick()
        order = {
            "id": f"TP{1760000000000 + self._sequence}",
            "items": [],
            "total_amount": 0,
            "customer_name": "ลูกค้า",
            "customer_phone": "0800000000",
            "delivery_type": "pickup",
            "payment_method": "cash",
            "payment_status": "pending",
            "slip_image_url": None,
            "status": status,
            "created_at": now,
            "updated_at": now,
            **fields,
        }
        self.orders[order["id"]] = order
        self.history[order["id"]] = [{"id": 1, "order_id": order["id"], "status": status, "changed_at": now}]
        return order

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.network_down:
            raise httpx.ConnectError("connection refused", request=request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"error": "Server exploded"})

        path, method = request.url.path, request.method
        if path == "/api/orders" and method == "POST":
            return self._create(json.loads(request.content))
        if path == "/api/orders" and method == "GET":
            status = request.url.params.get("status")
            orders = [o for o in reversed(self.orders.values()) if status in (None, o["status"])]
            return httpx.Response(200, json=orders)
        if path.startswith("/api/orders/user/"):
            user_id = path.rsplit("/", 1)[1]
            return httpx.Response(
                200, json=[o for o in self.orders.values() if o.get("line_user_id") == user_id]
            )
        if path == "/api/store/status":
            if method == "POST":
                self.store_status = json.loads(request.content)
                return httpx.Response(200, json={"success": True, **self.store_status})
            return httpx.Response(200, json=self.store_status)

        match = _ORDER_PATH.match(path)
        if match is None:
            return httpx.Response(404, json={"error": "Not found"})
        order = self.orders.get(match["order_id"])
        if order is None:
            return httpx.Response(404, json={"error": "Order not found"})

        rest = match["rest"]
        if rest is None and method == "GET":
            return httpx.Response(200, json=order)
        if rest == "/history":
            return httpx.Response(200, json=self.history[order["id"]])
        if rest == "/status" and method == "PUT":
            status = json.loads(request.content)["status"]
            now = self._tick()
            order.update(status=status, updated_at=now)
            rows = self.history[order["id"]]
            rows.append({"id": len(rows) + 1, "order_id": order["id"], "status": status, "changed_at": now})
            return httpx.Response(200, json=order)
        if rest == "/payment" and method == "PUT":
            order.update(payment_status=json.loads(request.content)["payment_status"])
            return httpx.Response(200, json=order)
        if rest == "/slip" and method == "POST":
            order.update(payment_status="paid", slip_image_url="/uploads/slips/fake.png")
            return httpx.Response(200, json={"message": "Slip uploaded", "order": order})
        return httpx.Response(405, json={"error": "Method not allowed"})

    def _create(self, body: dict) -> httpx.Response:
        # Same contract as the real API: request schema first, then the order rules.
        try:
            validate_order_payload(OrderCreate.model_validate(body))
        except ValidationError as exc:
            return httpx.Response(
                422, json={"error": "Validation failed", "details": json.loads(exc.json())}
            )
        except OrderValidationError as exc:
            return httpx.Response(400, json={"error": exc.message})
        fields = {key: value for key, value in body.items() if key != "status"}
        return httpx.Response(201, json=self.add_order(**fields))


class FakeConnection:
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.incoming: queue.Queue = queue.Queue()
        self.closed = False

    def send(self, message: str) -> None:
        if self.closed:
            raise OSError("connection closed")
        self.sent.append(json.loads(message))

    def recv(self, timeout: float | None = None) -> str:
        try:
            item = self.incoming.get(timeout=timeout)
        except queue.Empty as exc:
            raise TimeoutError("no message") from exc
        if isinstance(item, Exception):
            raise item
        return item

    def push(self, event: str, data: dict, room: str = "admin") -> None:
        self.incoming.put(json.dumps({"event": event, "room": room, "data": data}))

    def close(self) -> None:
        self.closed = True


class FakeConnector:
    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.connections: list[FakeConnection] = []
        self.urls: list[str] = []

    def __call__(self, url: str) -> FakeConnection:
        self.urls.append(url)
        if self.failures > 0:
            self.failures -= 1
            raise OSError("connection refused")
        connection = FakeConnection()
        self.connections.append(connection)
        return connection

    @property
    def latest(self) -> FakeConnection:
        return self.connections[-1]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def storage(backend):
    return SafeStorage(backend)


@pytest.fixture
def server():
    return FakeOrderServer()


@pytest.fixture
def api(server):
    client = ApiClient("http://api.test", timeout_s=1, token="admin-token", transport=httpx.MockTransport(server.handler))
    yield client
    client.close()


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def make_connector():
    return FakeConnector
