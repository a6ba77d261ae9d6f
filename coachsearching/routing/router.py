"""Router store.

Holds the current Route, re-parses it on every ``hashchange`` from its
Location, and notifies subscribers. ``navigate`` never touches the route
directly: it only changes the location, and the resulting event drives
the transition.
"""

import logging
import threading
from typing import Callable, Dict, List, Mapping, Optional

from coachsearching.routing.hash import Route, normalize_hash, parse_hash
from coachsearching.routing.location import Location

logger = logging.getLogger(__name__)

RouteListener = Callable[[Route], None]


class Router:
    """Hash router bound to one Location.

    Example:
        >>> router = Router(MemoryLocation("#home"))
        >>> router.navigate("coach/123?tab=reviews")
        >>> router.current_path, router.id
        ('coach', '123')
    """

    def __init__(self, location: Location):
        self.location = location
        self._route = parse_hash(location.hash)
        self._subscribers: List[RouteListener] = []
        self._lock = threading.RLock()
        location.add_listener(self._handle_hashchange)

    # State accessors
    @property
    def route(self) -> Route:
        with self._lock:
            return self._route

    @property
    def current_path(self) -> str:
        return self.route.path

    @property
    def params(self) -> Mapping[str, str]:
        return self.route.params

    @property
    def id(self) -> Optional[str]:
        return self.route.id

    def use_params(self) -> Dict[str, Optional[str]]:
        """Query params merged with the route id under ``"id"``."""
        route = self.route
        merged: Dict[str, Optional[str]] = dict(route.params)
        merged['id'] = route.id
        return merged

    # Transitions
    def navigate(self, path: str) -> None:
        """Request a transition to ``path`` (``#`` is added when missing)."""
        target = normalize_hash(path)
        logger.debug(f"Navigate to {target}")
        self.location.set_hash(target)

    def go_back(self) -> None:
        self.location.back()

    def _handle_hashchange(self, old_hash: str, new_hash: str) -> None:
        route = parse_hash(self.location.hash)
        with self._lock:
            self._route = route
            subscribers = list(self._subscribers)
        logger.debug(f"Route changed: {old_hash or '#'} -> {new_hash or '#'} ({route.path})")
        for subscriber in subscribers:
            try:
                subscriber(route)
            except Exception as e:
                logger.error(f"Route subscriber failed: {e}")

    # Observers
    def subscribe(self, listener: RouteListener) -> Callable[[], None]:
        """Register a route listener. Returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._subscribers:
                    self._subscribers.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Detach from the location and drop all subscribers."""
        self.location.remove_listener(self._handle_hashchange)
        with self._lock:
            self._subscribers.clear()
