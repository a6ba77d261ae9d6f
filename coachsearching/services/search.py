"""Debounced coach search.

Keystrokes are collapsed by a Debouncer; only the last query inside the
quiet period reaches the API. Each search takes a RequestGeneration
token, and a response that arrives after a newer search started is
dropped, so a slow stale response can never overwrite fresher results.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from coachsearching.config.settings import config
from coachsearching.services.api_client import CoachSearchingAPIClient, response_data
from coachsearching.services.schemas import CoachSummary, validate_rows
from coachsearching.utils.debounce import Debouncer, RequestGeneration
from coachsearching.utils.exceptions import ParsedError, parse_error

logger = logging.getLogger(__name__)


def _extract_coaches(payload: Any) -> List[dict]:
    data = response_data(payload)
    if isinstance(data, dict):
        for key in ('coaches', 'items', 'results'):
            if isinstance(data.get(key), list):
                return data[key]
        return []
    return data if isinstance(data, list) else []


class CoachSearch:
    """Search state for one session.

    Args:
        api_client: REST client used for ``search.coaches``
        delay: Debounce quiet period in seconds
        timer_factory: Passed through to the Debouncer
        on_change: Optional callback fired after results or error change
    """

    def __init__(
        self,
        api_client: CoachSearchingAPIClient,
        delay: float = None,
        timer_factory: Callable = threading.Timer,
        on_change: Optional[Callable[["CoachSearch"], None]] = None,
    ):
        self.api_client = api_client
        self.on_change = on_change
        self._generation = RequestGeneration()
        self._debouncer = Debouncer(
            config.SEARCH_DEBOUNCE_SECONDS if delay is None else delay,
            self._run,
            timer_factory=timer_factory,
        )
        self._lock = threading.Lock()
        self.query: str = ""
        self.filters: Dict[str, Any] = {}
        self.results: List[CoachSummary] = []
        self.error: Optional[ParsedError] = None
        self.is_searching = False
        self.search_count = 0

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def update_query(self, text: str, filters: Optional[Dict[str, Any]] = None) -> None:
        """Record new input and schedule a debounced search."""
        with self._lock:
            self.query = text or ""
            if filters is not None:
                self.filters = dict(filters)
            query, current_filters = self.query, dict(self.filters)
        self._debouncer.call(query, current_filters)

    def search_now(self) -> None:
        """Run a pending search immediately (e.g. on Enter)."""
        if not self._debouncer.flush():
            with self._lock:
                query, current_filters = self.query, dict(self.filters)
            self._run(query, current_filters)

    def _run(self, query: str, filters: Dict[str, Any]) -> None:
        token = self._generation.next()
        with self._lock:
            self.is_searching = True
            self.search_count += 1
        logger.debug(f"Searching coaches: {query!r} (request {token})")

        try:
            payload = self.api_client.search.coaches(query, filters)
        except Exception as e:
            if not self._generation.is_current(token):
                logger.debug(f"Dropping stale search error (request {token})")
                return
            parsed = parse_error(e)
            logger.error(f"Coach search failed: [{parsed.code}] {parsed.message}")
            with self._lock:
                self.error = parsed
                self.is_searching = False
            self._notify()
            return

        if not self._generation.is_current(token):
            logger.debug(f"Dropping stale search response (request {token})")
            return

        coaches = validate_rows(CoachSummary, _extract_coaches(payload), source="search")
        with self._lock:
            self.results = coaches
            self.error = None
            self.is_searching = False
        self._notify()

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self)
        except Exception as e:
            logger.error(f"Search change callback failed: {e}")

    def close(self) -> None:
        """Cancel the pending search and invalidate in-flight ones."""
        self._debouncer.cancel()
        self._generation.invalidate()
        with self._lock:
            self.is_searching = False
