from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

from resume_reviewer.core import API_KEY_STORAGE_KEY

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """Small persistent key-value store kept as a single JSON object on disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable storage file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items, indent=2), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._dump(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._dump(items)


class CredentialStore:
    """
    Holds the OpenAI API key.
    A key saved by the user always wins over the configured default.
    """

    def __init__(self, storage: KeyValueStorage, default: Optional[str] = None):
        self._storage = storage
        self._default = default or None

    def get(self) -> Optional[str]:
        local_key = self._storage.get_item(API_KEY_STORAGE_KEY)
        if local_key:
            return local_key
        return self._default

    def has(self) -> bool:
        return self.get() is not None

    def save(self, raw: Optional[str]) -> None:
        if raw and raw.strip():
            self._storage.set_item(API_KEY_STORAGE_KEY, raw.strip())

    def clear(self) -> None:
        self._storage.remove_item(API_KEY_STORAGE_KEY)
