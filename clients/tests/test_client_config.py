import pytest
from pydantic import ValidationError

from clients.shared.config import (
    ERROR_MESSAGES,
    ORDER_STATUS_LABELS,
    ClientSettings,
    format_phone_number,
)


def test_defaults_match_store_setup():
    settings = ClientSettings(_env_file=None)

    assert settings.cart_expiry_hours == 24
    assert settings.order_refresh_interval_s == 30
    assert settings.socket_reconnect_attempts == 5
    assert settings.socket_reconnect_delay_s == 1.0
    assert settings.geolocation_timeout_s == 10
    assert settings.free_delivery_radius_km == 2.0
    assert (settings.store_lat, settings.store_lng) == (14.584142066784167, 100.42882812383826)


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("TUMPANICH_CLIENT_API_BASE_URL", "https://api.tumpanich.test/")
    monkeypatch.setenv("TUMPANICH_CLIENT_FREE_DELIVERY_RADIUS_KM", "3")

    settings = ClientSettings(_env_file=None)

    assert settings.api_base_url == "https://api.tumpanich.test"
    assert settings.free_delivery_radius_km == 3.0


def test_settings_reject_non_positive_intervals():
    with pytest.raises(ValidationError):
        ClientSettings(_env_file=None, order_refresh_interval_s=0)


def test_labels_cover_every_status():
    assert set(ORDER_STATUS_LABELS) == {
        "pending",
        "confirmed",
        "cooking",
        "ready",
        "delivered",
        "completed",
        "cancelled",
    }
    assert ERROR_MESSAGES["network"]


def test_format_phone_number():
    assert format_phone_number("0812345678") == "081-234-5678"
    assert format_phone_number("+66 81") == "+66 81"
