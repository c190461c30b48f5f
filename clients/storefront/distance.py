"""Distance assist for choosing a delivery mode.

The customer's position comes from a `locate` callable (GPS on a device, a
fixed point in tests). Every failure is turned into one of a few user-facing
categories; nothing here raises to the caller.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from clients.shared.config import client_settings

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class LocationError(str, Enum):
    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


LOCATION_ERROR_MESSAGES = {
    LocationError.UNSUPPORTED: "เบราว์เซอร์ไม่รองรับ GPS",
    LocationError.PERMISSION_DENIED: "กรุณาอนุญาตการเข้าถึงตำแหน่ง GPS",
    LocationError.POSITION_UNAVAILABLE: "ไม่สามารถระบุตำแหน่งได้",
    LocationError.TIMEOUT: "หมดเวลาในการค้นหาตำแหน่ง",
    LocationError.UNKNOWN: "เกิดข้อผิดพลาด",
}


class LocationUnavailable(Exception):
    """Raised by a `locate` callable; `reason` picks the user-facing message."""

    def __init__(self, reason: LocationError, detail: str = "") -> None:
        super().__init__(detail or reason.value)
        self.reason = reason


@dataclass(frozen=True)
class DistanceResult:
    distance_km: float
    is_free_delivery: bool


@dataclass(frozen=True)
class DistanceCheck:
    result: DistanceResult | None = None
    error: LocationError | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    @property
    def message(self) -> str | None:
        if self.error is None:
            return None
        return LOCATION_ERROR_MESSAGES[self.error]


Locator = Callable[[float], tuple[float, float]]


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def classify_distance(distance_km: float, radius_km: float | None = None) -> DistanceResult:
    radius = radius_km if radius_km is not None else client_settings.free_delivery_radius_km
    # Eligibility uses the unrounded distance.
    return DistanceResult(
        distance_km=round(distance_km, 2),
        is_free_delivery=distance_km <= radius,
    )


def suggest_delivery_type(result: DistanceResult) -> str:
    return "free-delivery" if result.is_free_delivery else "easy-delivery"


def check_distance(
    locate: Locator | None,
    store_lat: float | None = None,
    store_lng: float | None = None,
    radius_km: float | None = None,
    timeout_s: float | None = None,
) -> DistanceCheck:
    if locate is None:
        return DistanceCheck(error=LocationError.UNSUPPORTED)

    try:
        lat, lng = locate(timeout_s if timeout_s is not None else client_settings.geolocation_timeout_s)
    except LocationUnavailable as exc:
        logger.info("location lookup failed: %s", exc.reason.value)
        return DistanceCheck(error=exc.reason)
    except TimeoutError:
        return DistanceCheck(error=LocationError.TIMEOUT)
    except PermissionError:
        return DistanceCheck(error=LocationError.PERMISSION_DENIED)
    except Exception:
        logger.exception("location lookup failed unexpectedly")
        return DistanceCheck(error=LocationError.UNKNOWN)

    distance = haversine_km(
        lat,
        lng,
        store_lat if store_lat is not None else client_settings.store_lat,
        store_lng if store_lng is not None else client_settings.store_lng,
    )
    return DistanceCheck(result=classify_distance(distance, radius_km))
