"""Local storage for the CoachSearching frontend.

A small key/value store with string values, modelled on the browser's
``localStorage``. Values survive reruns and, with ``FileStorage``,
restarts. Writes are last-writer-wins with no locking across processes.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    """Base interface for string key/value storage."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError

    def __contains__(self, key: str) -> bool:
        return self.get_item(key) is not None


class MemoryStorage(LocalStorage):
    """In-process storage, used in tests and when no file is configured."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items)


class FileStorage(MemoryStorage):
    """Storage persisted to a JSON file.

    The whole file is loaded once and rewritten atomically (temp file and
    rename) after every mutation.

    Args:
        path: Location of the JSON file; parent directories are created
    """

    def __init__(self, path):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage file {self.path}: not a JSON object")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        with self._lock:
            snapshot = dict(self._items)
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix='.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(snapshot, f)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.error(f"Failed to write storage file {self.path}: {e}")
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def set_item(self, key: str, value: str) -> None:
        super().set_item(key, value)
        self._flush()

    def remove_item(self, key: str) -> None:
        super().remove_item(key)
        self._flush()

    def clear(self) -> None:
        super().clear()
        self._flush()


def read_json(storage: LocalStorage, key: str, default: Any = None) -> Any:
    """Read and decode a JSON value, returning ``default`` on any problem."""
    raw = storage.get_item(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error(f"Error reading storage key \"{key}\": {e}")
        return default


def write_json(storage: LocalStorage, key: str, value: Any) -> bool:
    """Encode and store a JSON value. Returns False if it could not be encoded."""
    try:
        raw = json.dumps(value)
    except (TypeError, ValueError) as e:
        logger.error(f"Error setting storage key \"{key}\": {e}")
        return False
    storage.set_item(key, raw)
    return True
