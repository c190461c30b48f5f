"""Persistent key/value storage for client-local state.

Cart contents, the customer profile and preferences are conveniences: a
broken or full storage backend must never break the flow that uses them.
`SafeStorage` therefore converts every backend failure into a logged warning
and a default value.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryBackend:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self.values.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove_item(self, key: str) -> None:
        self.values.pop(key, None)


class JsonFileBackend:
    """One UTF-8 file per key inside `directory`."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class SafeStorage:
    def __init__(self, backend: KeyValueBackend) -> None:
        self.backend = backend

    def get(self, key: str, default: Any = None) -> Any:
        try:
            raw = self.backend.get_item(key)
        except Exception as exc:  # storage is best effort
            logger.warning("storage get(%r) failed: %s", key, exc)
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            return raw

    def set(self, key: str, value: Any) -> bool:
        try:
            serialized = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
            self.backend.set_item(key, serialized)
        except Exception as exc:  # storage is best effort
            logger.warning("storage set(%r) failed: %s", key, exc)
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            self.backend.remove_item(key)
        except Exception as exc:  # storage is best effort
            logger.warning("storage remove(%r) failed: %s", key, exc)
            return False
        return True
