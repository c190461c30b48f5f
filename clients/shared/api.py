from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from clients.shared.config import ERROR_MESSAGES, client_settings

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ApiError(Exception):
    status_code: int | None
    message: str

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None


class ApiClient:
    """Thin REST client shared by the storefront and the POS dashboard."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout_s: float | None = None,
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or client_settings.api_base_url).rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else client_settings.timeout_s
        self.token = token
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout_s),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(None, ERROR_MESSAGES["network"]) from exc

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)

        if not response.content:
            return None
        return response.json()

    # Orders

    def create_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/api/orders", json=payload)

    def get_order(self, order_id: str) -> dict[str, Any]:
        return self._request("GET", f"/api/orders/{order_id}")

    def get_user_orders(self, line_user_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"/api/orders/user/{line_user_id}")

    def list_orders(self, status: str | None = None, limit: int | None = None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {}
        if status:
            params["status"] = status
        if limit is not None:
            params["limit"] = limit
        return self._request("GET", "/api/orders", params=params)

    def update_order_status(self, order_id: str, status: str) -> dict[str, Any]:
        return self._request("PUT", f"/api/orders/{order_id}/status", json={"status": status})

    def update_payment_status(self, order_id: str, payment_status: str) -> dict[str, Any]:
        return self._request(
            "PUT",
            f"/api/orders/{order_id}/payment",
            json={"payment_status": payment_status},
        )

    def upload_slip(
        self,
        order_id: str,
        content: bytes,
        content_type: str,
        filename: str = "slip",
    ) -> dict[str, Any]:
        files = {"slip": (filename, content, content_type)}
        return self._request("POST", f"/api/orders/{order_id}/slip", files=files)

    def get_order_history(self, order_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"/api/orders/{order_id}/history")

    # Store

    def get_store_status(self) -> dict[str, Any]:
        return self._request("GET", "/api/store/status")

    def set_store_status(
        self,
        is_open: bool,
        message: str = "",
        close_time: str | None = None,
    ) -> dict[str, Any]:
        payload = {"isOpen": is_open, "message": message, "closeTime": close_time}
        return self._request("POST", "/api/store/status", json=payload)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"HTTP {response.status_code}"
