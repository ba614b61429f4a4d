"""String key-value stores backing the persisted capacity edits."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, MutableMapping, Optional, Protocol


class KeyValueStore(Protocol):
    """Minimal get/set string store (the browser ``localStorage`` contract)."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueStore:
    """Dictionary-backed store; pass ``st.session_state`` to scope to a session."""

    def __init__(self, backing: Optional[MutableMapping[str, str]] = None) -> None:
        self._items: MutableMapping[str, str] = backing if backing is not None else {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._items.get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFileKeyValueStore:
    """Store every key in one JSON object on disk so edits survive restarts.

    A missing or unreadable file behaves like an empty store. Writes replace
    the whole file atomically; one instance may be shared between sessions,
    so read-modify-write cycles are serialized on a lock.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logging.getLogger(__name__).debug("Ignoring unreadable state file %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._read_all()
            items[key] = value
            self._write_all(items)

    def _write_all(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
        ) as handle:
            json.dump(items, handle, indent=2, sort_keys=True)
        try:
            os.replace(handle.name, self.path)
        except OSError:
            os.unlink(handle.name)
            raise
