"""App-wide context store.

Cross-cutting UI state shared by every page: display currency and
language (persisted in local storage), three cached lookup tables,
notifications, and a few UI flags. One AppContext is built per session
and passed to the pages that need it.

Lookup tables follow one protocol (see LookupResource.ensure_loaded):
fresh cache entry first, otherwise a bounded wait for the database client
followed by a single guarded fetch.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel

from coachsearching.config.settings import (
    config as default_config,
    STORAGE_KEY_CURRENCY,
    STORAGE_KEY_LANGUAGE,
    STORAGE_KEY_LOOKUP_OPTIONS,
    STORAGE_KEY_CITIES,
    STORAGE_KEY_CERTIFICATIONS,
    STORAGE_KEY_ONBOARDING_PREFIX,
)
from coachsearching.routing.hash import Route
from coachsearching.routing.router import Router
from coachsearching.services.schemas import Certification, City, LookupOption, validate_rows
from coachsearching.services.supabase_service import SupabaseService
from coachsearching.utils.cache import StorageTTLCache, now_ms
from coachsearching.utils.storage import LocalStorage, read_json, write_json

logger = logging.getLogger(__name__)

# Lookup option types and the group each lands in
LOOKUP_GROUPS = {
    'specialty': 'specialties',
    'language': 'languages',
    'session_format': 'session_formats',
}


@dataclass(frozen=True)
class Notification:
    """Transient message shown to the user."""
    message: str
    type: str = 'info'
    id: int = 0
    expires_at: Optional[int] = None

    def is_expired(self, now: int) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class LookupResource:
    """One cached lookup table.

    Args:
        name: Label used in logs
        table: Supabase table to read
        storage_key: Local storage key of the cache envelope
        model: Pydantic model each row is validated against
        cache: Storage-backed TTL cache
        database: Supabase service providing the rows
        ready_attempts: Readiness polls before giving up
        ready_interval: Seconds between readiness polls
    """

    def __init__(
        self,
        name: str,
        table: str,
        storage_key: str,
        model: Type[BaseModel],
        cache: StorageTTLCache,
        database: SupabaseService,
        ready_attempts: int,
        ready_interval: float,
    ):
        self.name = name
        self.table = table
        self.storage_key = storage_key
        self.model = model
        self.cache = cache
        self.database = database
        self.ready_attempts = ready_attempts
        self.ready_interval = ready_interval
        self._data: List[dict] = []
        self._loaded = False
        self._loading = False
        self._latch = threading.Lock()
        self._state_lock = threading.Lock()
        self.fetch_count = 0

    @property
    def loaded(self) -> bool:
        with self._state_lock:
            return self._loaded

    @property
    def loading(self) -> bool:
        with self._state_lock:
            return self._loading

    @property
    def data(self) -> List[dict]:
        with self._state_lock:
            return list(self._data)

    @property
    def items(self) -> List[BaseModel]:
        return validate_rows(self.model, self.data, source=self.storage_key)

    def _set_loaded(self, data: List[dict]) -> None:
        with self._state_lock:
            self._data = data
            self._loaded = True

    def ensure_loaded(self) -> bool:
        """Load from cache or the database, once.

        Returns:
            True when data is loaded; False when another load is in
            flight or this attempt failed (a later call may retry)
        """
        if self.loaded:
            return True

        cached = self.cache.get(self.storage_key)
        if isinstance(cached, list):
            self._set_loaded(cached)
            logger.debug(f"Loaded {self.name} from cache ({len(cached)} rows)")
            return True

        # One fetch at a time per table
        if not self._latch.acquire(blocking=False):
            return False
        try:
            if self.loaded:
                return True
            with self._state_lock:
                self._loading = True

            if not self.database.wait_until_ready(self.ready_attempts, self.ready_interval):
                logger.warning(f"Database client not ready; {self.name} not loaded")
                return False

            self.fetch_count += 1
            rows = self.database.fetch_lookup_rows(self.table)
            data = [m.model_dump(mode='json') for m in validate_rows(self.model, rows, source=self.table)]
            self._set_loaded(data)
            self.cache.set(self.storage_key, data)
            logger.info(f"Loaded {len(data)} {self.name} from {self.table}")
            return True
        except Exception as e:
            logger.error(f"Error loading {self.name}: {e}")
            return False
        finally:
            with self._state_lock:
                self._loading = False
            self._latch.release()

    def load_in_background(self) -> Optional[threading.Thread]:
        """Start ensure_loaded on a daemon thread unless already loaded or loading."""
        if self.loaded or self.loading:
            return None
        thread = threading.Thread(target=self.ensure_loaded, name=f"lookup-{self.name}", daemon=True)
        thread.start()
        return thread

    def refresh(self) -> None:
        """Drop the cache entry and in-memory data; the next load refetches."""
        self.cache.invalidate(self.storage_key)
        with self._state_lock:
            self._data = []
            self._loaded = False
        logger.info(f"{self.name} cache cleared")


class AppContext:
    """Cross-cutting state for one user session.

    Args:
        storage: Local storage for preferences and caches
        database: Supabase service used to fetch lookup tables
        router: Router whose navigations close the mobile menu (optional)
        settings: Configuration
        clock: Callable returning epoch milliseconds
        cache_storage: Storage for the lookup caches; ``storage`` when omitted.
            Lookup tables are public, so they may live in storage shared
            between sessions while preferences stay per session.
    """

    def __init__(
        self,
        storage: LocalStorage,
        database: SupabaseService,
        router: Optional[Router] = None,
        settings=default_config,
        clock: Callable[[], int] = now_ms,
        cache_storage: Optional[LocalStorage] = None,
    ):
        self.storage = storage
        self.database = database
        self.settings = settings
        self._clock = clock
        self._lock = threading.Lock()

        stored_currency = storage.get_item(STORAGE_KEY_CURRENCY)
        self._currency = stored_currency if stored_currency in settings.CURRENCIES else settings.DEFAULT_CURRENCY

        stored_language = storage.get_item(STORAGE_KEY_LANGUAGE)
        self._language = (
            stored_language if stored_language in settings.SUPPORTED_LANGUAGES else settings.DEFAULT_LANGUAGE
        )

        self._notification: Optional[Notification] = None
        self._mobile_menu_open = False
        self._loading = False

        self.cache = StorageTTLCache(cache_storage or storage, settings.LOOKUP_CACHE_TTL_SECONDS, clock=clock)
        resource_args = dict(
            cache=self.cache,
            database=database,
            ready_attempts=settings.CLIENT_READY_MAX_ATTEMPTS,
            ready_interval=settings.CLIENT_READY_INTERVAL_SECONDS,
        )
        self.lookup_resource = LookupResource(
            'lookup options', 'cs_lookup_options', STORAGE_KEY_LOOKUP_OPTIONS, LookupOption, **resource_args
        )
        self.cities_resource = LookupResource(
            'cities', 'cs_cities', STORAGE_KEY_CITIES, City, **resource_args
        )
        self.certifications_resource = LookupResource(
            'certifications', 'cs_certifications', STORAGE_KEY_CERTIFICATIONS, Certification, **resource_args
        )

        self._unsubscribe = router.subscribe(self._on_route_change) if router is not None else None

    @property
    def resources(self) -> List[LookupResource]:
        return [self.lookup_resource, self.cities_resource, self.certifications_resource]

    # ------------------------------------------------------------------
    # Currency
    # ------------------------------------------------------------------

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def currencies(self):
        return self.settings.CURRENCIES

    def set_currency(self, code: str) -> bool:
        """Select and persist a currency. Unknown codes are ignored."""
        if code not in self.settings.CURRENCIES:
            logger.warning(f"Ignoring unknown currency: {code}")
            return False
        self._currency = code
        self.storage.set_item(STORAGE_KEY_CURRENCY, code)
        return True

    def format_price(self, price_in_eur: float) -> str:
        """Convert an EUR price to the selected currency, e.g. ``$109.00``."""
        currency = self.settings.CURRENCIES[self._currency]
        converted = float(price_in_eur or 0) * currency.rate
        return f"{currency.symbol}{converted:.2f}"

    # ------------------------------------------------------------------
    # Language
    # ------------------------------------------------------------------

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, language: str) -> bool:
        if language not in self.settings.SUPPORTED_LANGUAGES:
            logger.warning(f"Ignoring unsupported language: {language}")
            return False
        self._language = language
        self.storage.set_item(STORAGE_KEY_LANGUAGE, language)
        return True

    def get_localized_name(self, option: Any) -> str:
        """Name of a lookup option in the current language."""
        if isinstance(option, dict):
            return option.get(f"name_{self._language}") or option.get('name_en') or option.get('code', '')
        return option.localized_name(self._language, fallback=getattr(option, 'code', ''))

    def get_localized_city_name(self, city: Any) -> str:
        return self.get_localized_name(city)

    # ------------------------------------------------------------------
    # Lookup tables
    # ------------------------------------------------------------------

    @property
    def lookup_options(self) -> Dict[str, List[LookupOption]]:
        """Active lookup options grouped into specialties, languages, session_formats."""
        grouped: Dict[str, List[LookupOption]] = {group: [] for group in LOOKUP_GROUPS.values()}
        for option in self.lookup_resource.items:
            group = LOOKUP_GROUPS.get(option.type)
            if group is not None:
                grouped[group].append(option)
        return grouped

    @property
    def cities(self) -> List[City]:
        return self.cities_resource.items

    @property
    def certifications(self) -> List[Certification]:
        return self.certifications_resource.items

    @property
    def lookup_options_loaded(self) -> bool:
        return self.lookup_resource.loaded

    @property
    def cities_loaded(self) -> bool:
        return self.cities_resource.loaded

    @property
    def certifications_loaded(self) -> bool:
        return self.certifications_resource.loaded

    def load_lookups(self) -> bool:
        """Load all lookup tables synchronously. True when all are loaded."""
        results = [resource.ensure_loaded() for resource in self.resources]
        return all(results)

    def load_lookups_in_background(self) -> List[threading.Thread]:
        threads = [resource.load_in_background() for resource in self.resources]
        return [t for t in threads if t is not None]

    def refresh_lookup_options(self) -> None:
        self.lookup_resource.refresh()

    def refresh_cities(self) -> None:
        self.cities_resource.refresh()

    def refresh_certifications(self) -> None:
        self.certifications_resource.refresh()

    # ------------------------------------------------------------------
    # Notifications and UI flags
    # ------------------------------------------------------------------

    @property
    def notification(self) -> Optional[Notification]:
        """Current notification, or None once it has expired."""
        with self._lock:
            current = self._notification
            if current is not None and current.is_expired(self._clock()):
                self._notification = None
                return None
            return current

    def show_notification(self, message: str, type: str = 'info', duration_ms: Optional[int] = None) -> Notification:
        """Show a message; ``duration_ms <= 0`` keeps it until cleared."""
        duration_ms = self.settings.NOTIFICATION_DURATION_MS if duration_ms is None else duration_ms
        now = self._clock()
        notification = Notification(
            message=message,
            type=type,
            id=now,
            expires_at=now + duration_ms if duration_ms > 0 else None,
        )
        with self._lock:
            self._notification = notification
        return notification

    def clear_notification(self) -> None:
        with self._lock:
            self._notification = None

    @property
    def is_mobile_menu_open(self) -> bool:
        return self._mobile_menu_open

    def set_mobile_menu_open(self, is_open: bool) -> None:
        self._mobile_menu_open = bool(is_open)

    @property
    def is_loading(self) -> bool:
        return self._loading

    def set_loading(self, loading: bool) -> None:
        self._loading = bool(loading)

    def _on_route_change(self, route: Route) -> None:
        self._mobile_menu_open = False

    # ------------------------------------------------------------------
    # Onboarding progress
    # ------------------------------------------------------------------

    def _onboarding_key(self, user_id: str) -> str:
        return f"{STORAGE_KEY_ONBOARDING_PREFIX}{user_id}"

    def save_onboarding_progress(self, user_id: str, step: int, data: dict) -> bool:
        if not user_id:
            return False
        return write_json(self.storage, self._onboarding_key(user_id), {
            'step': step,
            'data': data,
            'timestamp': self._clock(),
        })

    def load_onboarding_progress(self, user_id: str) -> Optional[dict]:
        """Saved ``{step, data, timestamp}``, or None if absent or malformed."""
        if not user_id:
            return None
        saved = read_json(self.storage, self._onboarding_key(user_id))
        if not isinstance(saved, dict) or not isinstance(saved.get('data'), dict):
            return None
        return saved

    def clear_onboarding_progress(self, user_id: str) -> None:
        if user_id:
            self.storage.remove_item(self._onboarding_key(user_id))

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
