from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CART_STORAGE_KEY = "tum-panich-cart-v3"
CUSTOMER_STORAGE_KEY = "tum-panich-customer"
FAVORITES_STORAGE_KEY = "tumpanich-favorites"
POS_SOUND_STORAGE_KEY = "tumpanich-pos-sound"


class ClientSettings(BaseSettings):
    api_base_url: str = "http://localhost:8000"
    ws_url: str = "ws://localhost:8000/ws"
    timeout_s: float = 10.0

    cart_expiry_hours: float = 24
    order_refresh_interval_s: float = 30
    socket_reconnect_attempts: int = 5
    socket_reconnect_delay_s: float = 1.0

    geolocation_timeout_s: float = 10
    free_delivery_radius_km: float = 2.0
    store_lat: float = 14.584142066784167
    store_lng: float = 100.42882812383826

    storage_dir: str = "./.tumpanich"

    model_config = SettingsConfigDict(
        env_prefix="TUMPANICH_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator(
        "timeout_s",
        "cart_expiry_hours",
        "order_refresh_interval_s",
        "geolocation_timeout_s",
        "free_delivery_radius_km",
    )
    @classmethod
    def validate_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be > 0")
        return value

    @field_validator("socket_reconnect_attempts")
    @classmethod
    def validate_attempts(cls, value: int) -> int:
        if value < 0:
            raise ValueError("socket_reconnect_attempts must be >= 0")
        return value

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")


client_settings = ClientSettings()


ERROR_MESSAGES = {
    "network": "ไม่สามารถเชื่อมต่อเซิร์ฟเวอร์ได้ กรุณาตรวจสอบอินเทอร์เน็ต",
    "order_load": "ไม่สามารถโหลดข้อมูลออเดอร์ได้ กรุณาลองใหม่",
    "order_create": "ไม่สามารถสร้างออเดอร์ได้ กรุณาลองใหม่",
    "upload_slip": "ไม่สามารถอัพโหลดสลิปได้ กรุณาลองใหม่",
    "status_update": "ไม่สามารถอัพเดทสถานะได้ กรุณาลองใหม่",
    "menu_load": "ไม่สามารถโหลดเมนูได้ กรุณาลองใหม่",
    "unauthorized": "ไม่มีสิทธิ์เข้าถึง กรุณาเข้าสู่ระบบใหม่",
    "unknown": "เกิดข้อผิดพลาด กรุณาลองใหม่อีกครั้ง",
}

ORDER_STATUS_LABELS = {
    "pending": "รอยืนยัน",
    "confirmed": "ยืนยันแล้ว",
    "cooking": "กำลังทำ",
    "ready": "พร้อมส่ง/รับ",
    "delivered": "ส่งแล้ว",
    "completed": "เสร็จสิ้น",
    "cancelled": "ยกเลิก",
}

DELIVERY_TYPE_LABELS = {
    "pickup": "รับที่ร้าน",
    "free-delivery": "จัดส่งฟรี",
    "easy-delivery": "Easy Delivery",
}

PAYMENT_METHOD_LABELS = {
    "cash": "เงินสด",
    "promptpay": "พร้อมเพย์",
}

PAYMENT_STATUS_LABELS = {
    "pending": "รอชำระ",
    "paid": "ชำระแล้ว",
    "confirmed": "ยืนยันแล้ว",
}


def format_phone_number(phone: str) -> str:
    digits = "".join(ch for ch in phone if ch.isdigit())
    if len(digits) == 10:
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    return phone
