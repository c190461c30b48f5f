import pytest

from app.auth.jwt import issue_jwt
from app.config import settings


def _order_payload(**overrides) -> dict:
    payload = {
        "items": [
            {"id": "line-1", "productId": "p-a", "productName": "Product A", "price": 50},
            {"id": "line-2", "productId": "p-b", "productName": "Product B", "price": 60},
        ],
        "total_amount": 110,
        "customer_name": "Somchai",
        "customer_phone": "0812345678",
        "line_user_id": "U-line-1",
        "delivery_type": "pickup",
        "payment_method": "cash",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def order_payload():
    return _order_payload


@pytest.fixture
def create_order(client):
    def _create(**overrides) -> dict:
        response = client.post("/api/orders", json=_order_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def customer_headers():
    token = issue_jwt({"sub": "U-line-1", "role": "CUSTOMER"}, settings.jwt_secret)
    return {"Authorization": f"Bearer {token}"}
