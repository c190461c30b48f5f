import uuid
from pathlib import Path

from app.config import ALLOWED_SLIP_CONTENT_TYPES, settings
from app.observability import log_event
from app.services.errors import OrderValidationError

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def slips_dir() -> Path:
    return Path(settings.upload_dir) / "slips"


def store_slip(content: bytes, content_type: str | None) -> str:
    """Persist an uploaded payment slip and return its public URL path."""
    if content_type not in ALLOWED_SLIP_CONTENT_TYPES:
        raise OrderValidationError("Only JPEG, PNG, and WebP images are allowed")
    if not content:
        raise OrderValidationError("No slip image provided")
    if len(content) > settings.slip_max_bytes:
        raise OrderValidationError("Slip image is too large")

    directory = slips_dir()
    directory.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4()}.{_EXTENSIONS[content_type]}"
    (directory / filename).write_bytes(content)

    log_event(f"slip_stored:{filename}")
    return f"/uploads/slips/{filename}"
