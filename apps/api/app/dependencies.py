from typing import Any, Protocol

from app.services.broadcast import broadcaster


class EventPublisher(Protocol):
    def publish(self, room: str, event: str, data: dict[str, Any]) -> None: ...


class NoopEventPublisher:
    def publish(self, room: str, event: str, data: dict[str, Any]) -> None:
        return None


def get_event_publisher() -> EventPublisher:
    return broadcaster
