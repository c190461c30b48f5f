from __future__ import annotations

from datetime import datetime
from typing import Any


def _updated_at(order: dict[str, Any]) -> datetime | None:
    value = order.get("updated_at")
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def is_stale(current: dict[str, Any] | None, incoming: dict[str, Any]) -> bool:
    """True when `incoming` is older than the copy already held."""
    if current is None:
        return False
    current_at, incoming_at = _updated_at(current), _updated_at(incoming)
    if current_at is None or incoming_at is None:
        return False
    if (current_at.tzinfo is None) != (incoming_at.tzinfo is None):
        return False
    return incoming_at < current_at


def apply_status_update(
    current: dict[str, Any] | None,
    incoming: dict[str, Any],
) -> dict[str, Any]:
    """Merge a pushed order snapshot over the local copy unless it is stale."""
    if is_stale(current, incoming):
        return current
    return {**(current or {}), **incoming}
