"""Per-session service container.

Builds every collaborator a session needs exactly once and wires them
together explicitly: storage, Supabase service, REST client, location,
router, app context and coach search. Only the public lookup cache file
is shared between sessions; the app keeps one AppServices per session.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, MutableMapping, Optional

from coachsearching.config.settings import config as default_config
from coachsearching.context.app_context import AppContext
from coachsearching.routing.location import Location, MemoryLocation, QueryParamLocation
from coachsearching.routing.router import Router
from coachsearching.services.api_client import CoachSearchingAPIClient, StoredSessionTokenProvider
from coachsearching.services.search import CoachSearch
from coachsearching.services.supabase_service import SupabaseService
from coachsearching.utils.storage import FileStorage, LocalStorage, MemoryStorage

logger = logging.getLogger(__name__)

_shared_cache_storage: Optional[FileStorage] = None


def shared_cache_storage(path: str) -> LocalStorage:
    """File storage for public lookup caches, shared by all sessions of the process."""
    global _shared_cache_storage
    if _shared_cache_storage is None or str(_shared_cache_storage.path) != str(path):
        _shared_cache_storage = FileStorage(path)
    return _shared_cache_storage


@dataclass
class AppServices:
    """Everything one session needs, built once."""
    settings: Any
    storage: LocalStorage
    cache_storage: LocalStorage
    database: SupabaseService
    api_client: CoachSearchingAPIClient
    location: Location
    router: Router
    context: AppContext
    search: CoachSearch
    closed: bool = field(default=False)

    def close(self) -> None:
        if self.closed:
            return
        self.search.close()
        self.context.close()
        self.router.close()
        self.closed = True


def build_services(
    query_params: Optional[MutableMapping[str, str]] = None,
    settings=default_config,
    storage: Optional[LocalStorage] = None,
    cache_storage: Optional[LocalStorage] = None,
    database: Optional[SupabaseService] = None,
    api_client: Optional[CoachSearchingAPIClient] = None,
    start_database: bool = True,
) -> AppServices:
    """Build and wire the services of one session.

    Args:
        query_params: Mapping holding the route (``st.query_params``);
            an in-memory location is used when omitted
        settings: Configuration
        storage: Per-session storage (preferences, auth session)
        cache_storage: Storage for lookup caches; a shared file when
            LOCAL_STORAGE_PATH is set, otherwise the per-session storage
        database: Prebuilt Supabase service (tests)
        api_client: Prebuilt REST client (tests)
        start_database: Start Supabase initialization in the background
    """
    storage = storage if storage is not None else MemoryStorage()
    if cache_storage is None:
        cache_storage = shared_cache_storage(settings.LOCAL_STORAGE_PATH) if settings.LOCAL_STORAGE_PATH else storage

    if database is None:
        database = SupabaseService(settings=settings, storage=storage)
        if start_database:
            database.start()

    if api_client is None:
        api_client = CoachSearchingAPIClient(
            base_url=settings.API_BASE_URL,
            timeout=settings.API_TIMEOUT_SECONDS,
            max_retries=settings.MAX_RETRY_ATTEMPTS,
            backoff_ms=settings.RETRY_BACKOFF_MS,
            token_provider=StoredSessionTokenProvider(storage),
        )

    if query_params is not None:
        location: Location = QueryParamLocation(query_params, key=settings.ROUTE_QUERY_PARAM)
    else:
        location = MemoryLocation()

    router = Router(location)
    context = AppContext(storage, database, router=router, settings=settings, cache_storage=cache_storage)
    search = CoachSearch(api_client, delay=settings.SEARCH_DEBOUNCE_SECONDS)

    logger.debug("Session services built")
    return AppServices(
        settings=settings,
        storage=storage,
        cache_storage=cache_storage,
        database=database,
        api_client=api_client,
        location=location,
        router=router,
        context=context,
        search=search,
    )
