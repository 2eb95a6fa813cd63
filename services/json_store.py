"""Key-value blob stores backing persisted client state.

Services persist one opaque JSON blob per stable key. The file store keeps all
keys in a single JSON document and serialises writers with a file lock.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from filelock import FileLock

DEFAULT_LOCK_TIMEOUT_SECONDS = 5.0


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, blob: str) -> None:
        ...


def ensure_parent_dir(path: Path) -> None:
    """Ensure ``path`` can be read/written by creating the parent dir."""
    path.parent.mkdir(parents=True, exist_ok=True)


def read_json_document(path: Path) -> Dict[str, Any]:
    """Return the JSON object stored at ``path`` or an empty dict when missing."""
    if not path.exists():
        return {}
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return payload


def write_json_document(path: Path, payload: Dict[str, Any]) -> None:
    """Persist ``payload`` as JSON, replacing the file atomically."""
    ensure_parent_dir(path)
    tmp_path = path.with_name(f"{path.name}.tmp")
    tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp_path.replace(path)


class JsonFileKeyValueStore:
    """Blob store persisted to one JSON file."""

    def __init__(self, path: Path, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS) -> None:
        self._path = Path(path)
        self._lock = FileLock(str(self._path.with_name(f"{self._path.name}.lock")), timeout=lock_timeout)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        payload = read_json_document(self._path)
        value = payload.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError(f"Entry {key!r} in {self._path} is not a string blob")
        return value

    def set(self, key: str, blob: str) -> None:
        ensure_parent_dir(self._path)
        with self._lock:
            try:
                payload = read_json_document(self._path)
            except ValueError:
                # A corrupt document is replaced rather than blocking every write.
                payload = {}
            payload[key] = blob
            write_json_document(self._path, payload)


class InMemoryKeyValueStore:
    """Process-local blob store used by tests and previews."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, blob: str) -> None:
        with self._lock:
            self._values[key] = blob


__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "ensure_parent_dir",
    "read_json_document",
    "write_json_document",
]
