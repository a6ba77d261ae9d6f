"""
CoachSearching Frontend Configuration.

Frozen dataclass for immutable configuration with environment overrides.
All magic numbers and configuration values should be defined here.

Environment variables can override defaults (read at module import time):
- API_BASE_URL: REST API base URL
- ENV_URL: Remote endpoint that publishes the Supabase credentials
- SUPABASE_URL / SUPABASE_ANON_KEY: Supabase credentials (skip ENV_URL)
- API_TIMEOUT_SECONDS: Override API timeout
- LOOKUP_CACHE_TTL_SECONDS: Lifetime of cached lookup tables
- LOCAL_STORAGE_PATH: JSON file backing the local storage
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping


def _get_int_env(name: str, default: int) -> int:
    """Get integer environment variable or return default."""
    val = os.getenv(name)
    if val is not None:
        try:
            return int(val)
        except ValueError:
            pass
    return default


def _get_str_env(name: str, default: str) -> str:
    """Get string environment variable or return default."""
    return os.getenv(name, default)


def _get_bool_env(name: str, default: bool) -> bool:
    """Get boolean environment variable or return default."""
    val = os.getenv(name)
    if val is not None:
        return val.lower() in ('true', '1', 'yes')
    return default


@dataclass(frozen=True)
class Currency:
    """Display currency with its conversion rate from EUR."""
    code: str
    symbol: str
    rate: float


# Prices are stored in EUR; rates convert EUR to the display currency
CURRENCIES: Mapping[str, Currency] = MappingProxyType({
    'EUR': Currency('EUR', '€', 1.0),
    'USD': Currency('USD', '$', 1.09),
    'GBP': Currency('GBP', '£', 0.86),
    'CHF': Currency('CHF', 'CHF ', 0.95),
})


@dataclass(frozen=True)
class CoachSearchingConfig:
    """Immutable CoachSearching configuration.

    frozen=True ensures config values cannot be accidentally modified.
    Environment variables are read at module import time.
    """

    # Application
    APP_NAME: str = "CoachSearching"
    APP_ICON: str = "🧭"
    APP_VERSION: str = field(
        default_factory=lambda: _get_str_env('APP_VERSION', "1.0.0")
    )
    DEBUG: bool = field(
        default_factory=lambda: _get_bool_env('DEBUG', False)
    )
    LOG_LEVEL: str = field(
        default_factory=lambda: _get_str_env('LOG_LEVEL', 'INFO')
    )

    # REST API
    API_BASE_URL: str = field(
        default_factory=lambda: _get_str_env(
            'API_BASE_URL', 'https://clouedo.com/coachsearching/api'
        )
    )
    API_TIMEOUT_SECONDS: int = field(
        default_factory=lambda: _get_int_env('API_TIMEOUT_SECONDS', 30)
    )
    MAX_RETRY_ATTEMPTS: int = field(
        default_factory=lambda: _get_int_env('MAX_RETRY_ATTEMPTS', 3)
    )
    # Linear backoff: RETRY_BACKOFF_MS * attempt
    RETRY_BACKOFF_MS: int = 1000

    # Supabase
    ENV_URL: str = field(
        default_factory=lambda: _get_str_env(
            'ENV_URL', 'https://clouedo.com/coachsearching/api/env.php'
        )
    )
    SUPABASE_URL: str = field(
        default_factory=lambda: _get_str_env('SUPABASE_URL', '')
    )
    SUPABASE_ANON_KEY: str = field(
        default_factory=lambda: _get_str_env('SUPABASE_ANON_KEY', '')
    )
    # Bounded wait for the database client: 50 x 100ms
    CLIENT_READY_MAX_ATTEMPTS: int = 50
    CLIENT_READY_INTERVAL_MS: int = 100

    # Lookup tables (24 hour TTL)
    LOOKUP_CACHE_TTL_SECONDS: int = field(
        default_factory=lambda: _get_int_env('LOOKUP_CACHE_TTL_SECONDS', 86400)
    )

    # Local storage
    LOCAL_STORAGE_PATH: str = field(
        default_factory=lambda: _get_str_env(
            'LOCAL_STORAGE_PATH', os.path.join('.', 'data', 'local_storage.json')
        )
    )

    # Search
    SEARCH_DEBOUNCE_MS: int = field(
        default_factory=lambda: _get_int_env('SEARCH_DEBOUNCE_MS', 300)
    )
    SEARCH_RESULTS_POLL_SECONDS: float = 0.5

    # Locale
    DEFAULT_CURRENCY: str = "EUR"
    DEFAULT_LANGUAGE: str = "en"
    SUPPORTED_LANGUAGES: tuple = ("en", "de", "fr", "es", "it")

    # Notifications
    NOTIFICATION_DURATION_MS: int = 5000

    # Pagination
    COACHES_PER_PAGE: int = 12
    REVIEWS_PER_PAGE: int = 5

    # Session durations (minutes)
    SESSION_DURATIONS: tuple = (30, 60, 90, 120)

    # Platform fees
    PLATFORM_FEE_PERCENT: float = 0.15
    FOUNDING_COACH_FEE_PERCENT: float = 0.10

    # Routing
    ROUTE_QUERY_PARAM: str = "route"
    PUBLIC_ROUTES: FrozenSet[str] = frozenset({
        'home', 'coaches', 'coach', 'login', 'signup',
    })

    @property
    def CURRENCIES(self) -> Mapping[str, Currency]:
        """Get the supported display currencies."""
        return CURRENCIES

    @property
    def LOOKUP_CACHE_TTL_MS(self) -> int:
        """Get lookup cache TTL in milliseconds."""
        return self.LOOKUP_CACHE_TTL_SECONDS * 1000

    @property
    def CLIENT_READY_INTERVAL_SECONDS(self) -> float:
        """Get the client readiness poll interval in seconds."""
        return self.CLIENT_READY_INTERVAL_MS / 1000.0

    @property
    def SEARCH_DEBOUNCE_SECONDS(self) -> float:
        """Get search debounce delay in seconds."""
        return self.SEARCH_DEBOUNCE_MS / 1000.0


# Global immutable config instance
config = CoachSearchingConfig()

# Hash routes used by navigation
ROUTES = MappingProxyType({
    'HOME': '#home',
    'COACHES': '#coaches',
    'LOGIN': '#login',
    'SIGNUP': '#signup',
    'DASHBOARD': '#dashboard',
    'ONBOARDING': '#onboarding',
    'SIGNOUT': '#signout',
    'COACH_PROFILE': '#coach',
    'DISCOVER': '#discover',
    'QUIZ': '#quiz',
})

# Local storage keys
STORAGE_KEY_CURRENCY = 'currency'
STORAGE_KEY_LANGUAGE = 'language'
STORAGE_KEY_AUTH_SESSION = 'supabase.auth.token'
STORAGE_KEY_LOOKUP_OPTIONS = 'cs_lookup_options'
STORAGE_KEY_CITIES = 'cs_cities'
STORAGE_KEY_CERTIFICATIONS = 'cs_certifications'
STORAGE_KEY_ONBOARDING_PREFIX = 'onboarding_'
