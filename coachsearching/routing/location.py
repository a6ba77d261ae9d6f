"""Location models standing in for ``window.location.hash``.

A Location holds the current hash fragment, a history stack, and the
``hashchange`` listeners. Listeners run synchronously, in registration
order, and only when the hash actually changes.
"""

import logging
import threading
from typing import Callable, List, MutableMapping, Optional

from coachsearching.routing.hash import normalize_hash

logger = logging.getLogger(__name__)

HashChangeListener = Callable[[str, str], None]


class Location:
    """Base location: hash storage is left to subclasses."""

    def __init__(self):
        self._listeners: List[HashChangeListener] = []
        self._history: List[str] = []
        self._lock = threading.RLock()

    # Subclasses provide raw storage
    def _read(self) -> str:
        raise NotImplementedError

    def _write(self, value: str) -> None:
        raise NotImplementedError

    @property
    def hash(self) -> str:
        """Current fragment including ``#``, or ``""`` when none is set."""
        return self._read()

    @property
    def history(self) -> List[str]:
        with self._lock:
            return list(self._history)

    def add_listener(self, listener: HashChangeListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: HashChangeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def set_hash(self, value: str) -> bool:
        """Change the hash and fire ``hashchange``.

        Returns:
            False when the hash was already current (no event fired)
        """
        new_hash = normalize_hash(value)
        with self._lock:
            old_hash = self._read()
            if new_hash == old_hash:
                return False
            self._history.append(old_hash)
            self._write(new_hash)
        self._emit(old_hash, new_hash)
        return True

    def back(self) -> bool:
        """Return to the previous hash. No-op with an empty history."""
        with self._lock:
            if not self._history:
                return False
            old_hash = self._read()
            new_hash = self._history.pop()
            self._write(new_hash)
        if new_hash != old_hash:
            self._emit(old_hash, new_hash)
        return True

    def _emit(self, old_hash: str, new_hash: str) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(old_hash, new_hash)
            except Exception as e:
                logger.error(f"hashchange listener failed: {e}")


class MemoryLocation(Location):
    """Location kept in memory."""

    def __init__(self, initial_hash: str = ""):
        super().__init__()
        self._hash = initial_hash or ""

    def _read(self) -> str:
        return self._hash

    def _write(self, value: str) -> None:
        self._hash = value


class QueryParamLocation(Location):
    """Location stored in a query parameter mapping.

    Designed for ``st.query_params``: the fragment lives under ``key``
    (without the ``#``) so the browser URL stays shareable, e.g.
    ``?route=coach/123?tab=reviews``.

    Args:
        query_params: Mutable mapping of query parameters
        key: Parameter holding the fragment
    """

    def __init__(self, query_params: MutableMapping[str, str], key: str = "route"):
        super().__init__()
        self.query_params = query_params
        self.key = key
        self._last_seen = self._read()

    def _read(self) -> str:
        value = self.query_params.get(self.key)
        if not value:
            return ""
        return normalize_hash(value)

    def _write(self, value: str) -> None:
        fragment = value[1:] if value.startswith('#') else value
        if fragment:
            self.query_params[self.key] = fragment
        elif self.key in self.query_params:
            del self.query_params[self.key]
        self._last_seen = value

    def sync(self) -> bool:
        """Fire ``hashchange`` if the mapping was changed from outside.

        Call once per script run; the user may have edited the URL or
        used the browser's back button since the last run.
        """
        with self._lock:
            current = self._read()
            previous: Optional[str] = self._last_seen
            if current == previous:
                return False
            self._history.append(previous)
            self._last_seen = current
        self._emit(previous, current)
        return True
