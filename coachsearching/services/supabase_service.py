"""Supabase access for the CoachSearching frontend.

Wraps the ``supabase`` client with explicit initialization: the app
constructs one SupabaseService per session, starts it, and anything that
needs the database waits on its ready event (bounded) instead of probing
a global.

Every backend failure is re-raised as DatabaseError carrying the
backend's error code.
"""

import logging
import threading
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Union

import requests
from supabase import Client, create_client

from coachsearching.config.settings import config as default_config, STORAGE_KEY_AUTH_SESSION
from coachsearching.utils.exceptions import ClientNotReadyError, DatabaseError
from coachsearching.utils.storage import LocalStorage, write_json

logger = logging.getLogger(__name__)


def _database_error(e: Exception, action: str) -> DatabaseError:
    """Convert a supabase/postgrest/gotrue exception into DatabaseError."""
    code = getattr(e, 'code', None)
    message = getattr(e, 'message', None) or str(e) or f"{action} failed"
    return DatabaseError(str(message), code=str(code) if code is not None else None,
                         details=getattr(e, 'details', None))


def _session_to_dict(session: Any) -> Optional[dict]:
    if session is None:
        return None
    if isinstance(session, dict):
        return session
    if hasattr(session, 'model_dump'):
        return session.model_dump(mode='json')
    return {
        'access_token': getattr(session, 'access_token', None),
        'refresh_token': getattr(session, 'refresh_token', None),
        'expires_at': getattr(session, 'expires_at', None),
    }


class SupabaseService:
    """Database, auth and storage helpers over one Supabase client.

    Args:
        settings: Configuration (credentials, readiness budget)
        storage: Local storage where the auth session is persisted
        client_factory: Callable(url, key) -> client; ``create_client`` by default
        http: requests-compatible module/session used to fetch remote config
    """

    def __init__(
        self,
        settings=default_config,
        storage: Optional[LocalStorage] = None,
        client_factory: Callable[[str, str], Client] = create_client,
        http=requests,
    ):
        self.settings = settings
        self.storage = storage
        self._client_factory = client_factory
        self._http = http
        self._client: Optional[Client] = None
        self._ready = threading.Event()
        self._init_lock = threading.Lock()
        self._init_thread: Optional[threading.Thread] = None
        self.init_error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    @property
    def client(self) -> Client:
        """The Supabase client; raises ClientNotReadyError before initialization."""
        if not self._ready.is_set() or self._client is None:
            raise ClientNotReadyError()
        return self._client

    def _resolve_credentials(self) -> tuple:
        url = self.settings.SUPABASE_URL
        key = self.settings.SUPABASE_ANON_KEY
        if url and key:
            return url, key

        logger.info(f"Fetching Supabase config from {self.settings.ENV_URL}")
        response = self._http.get(self.settings.ENV_URL, timeout=self.settings.API_TIMEOUT_SECONDS)
        response.raise_for_status()
        remote = response.json()
        url = remote.get('SUPABASE_URL')
        key = remote.get('SUPABASE_ANON_KEY')
        if not url or not key:
            raise DatabaseError("Missing Supabase config", code='config_missing')
        return url, key

    def initialize(self) -> Client:
        """Create the client once. Safe to call repeatedly and concurrently."""
        with self._init_lock:
            if self._client is not None:
                return self._client
            try:
                url, key = self._resolve_credentials()
                self._client = self._client_factory(url, key)
            except DatabaseError as e:
                self.init_error = e
                logger.error(f"Supabase initialization failed: {e.message}")
                raise
            except Exception as e:
                self.init_error = e
                logger.error(f"Supabase initialization failed: {e}")
                raise _database_error(e, "initialize")
            self.init_error = None
            self._ready.set()
            logger.info("Supabase client initialized")
            return self._client

    def start(self) -> threading.Thread:
        """Initialize on a background thread; returns the thread."""
        with self._init_lock:
            if self._init_thread is not None and self._init_thread.is_alive():
                return self._init_thread
            thread = threading.Thread(target=self._initialize_quietly, name="supabase-init", daemon=True)
            self._init_thread = thread
        thread.start()
        return thread

    def _initialize_quietly(self) -> None:
        try:
            self.initialize()
        except DatabaseError:
            pass  # recorded in init_error and logged by initialize()

    def wait_until_ready(self, attempts: int = None, interval: float = None) -> bool:
        """Poll the ready event, at most ``attempts`` times ``interval`` seconds apart.

        Returns:
            True once the client is ready, False when the budget ran out
        """
        attempts = attempts if attempts is not None else self.settings.CLIENT_READY_MAX_ATTEMPTS
        interval = interval if interval is not None else self.settings.CLIENT_READY_INTERVAL_SECONDS
        for _ in range(max(1, attempts)):
            if self._ready.wait(interval):
                return True
        logger.warning(f"Supabase client not ready after {attempts * interval:.1f}s")
        return False

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def _persist_session(self, session: Any) -> None:
        if self.storage is None:
            return
        data = _session_to_dict(session)
        if data is None:
            self.storage.remove_item(STORAGE_KEY_AUTH_SESSION)
        else:
            write_json(self.storage, STORAGE_KEY_AUTH_SESSION, {'currentSession': data})

    def get_session(self):
        try:
            return self.client.auth.get_session()
        except ClientNotReadyError:
            raise
        except Exception as e:
            raise _database_error(e, "get_session")

    def sign_in_with_email(self, email: str, password: str):
        try:
            result = self.client.auth.sign_in_with_password({'email': email, 'password': password})
        except ClientNotReadyError:
            raise
        except Exception as e:
            raise _database_error(e, "sign_in")
        self._persist_session(getattr(result, 'session', None))
        logger.info("User signed in")
        return result

    def sign_up_with_email(self, email: str, password: str, metadata: Optional[dict] = None):
        try:
            result = self.client.auth.sign_up({
                'email': email,
                'password': password,
                'options': {'data': metadata or {}},
            })
        except ClientNotReadyError:
            raise
        except Exception as e:
            raise _database_error(e, "sign_up")
        # Sessions are only returned when email confirmation is disabled
        if getattr(result, 'session', None) is not None:
            self._persist_session(result.session)
        return result

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except ClientNotReadyError:
            raise
        except Exception as e:
            raise _database_error(e, "sign_out")
        finally:
            self._persist_session(None)
        logger.info("User signed out")

    def reset_password(self, email: str, redirect_to: Optional[str] = None) -> None:
        options = {'redirect_to': redirect_to} if redirect_to else {}
        try:
            self.client.auth.reset_password_for_email(email, options)
        except ClientNotReadyError:
            raise
        except Exception as e:
            raise _database_error(e, "reset_password")

    def update_user(self, updates: dict):
        try:
            return self.client.auth.update_user(updates)
        except ClientNotReadyError:
            raise
        except Exception as e:
            raise _database_error(e, "update_user")

    def on_auth_state_change(self, callback: Callable[[str, Any], None]):
        """Register callback(event, session); also keeps the stored session current."""
        def _listener(event, session):
            self._persist_session(session)
            callback(event, session)

        return self.client.auth.on_auth_state_change(_listener)

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    def query(
        self,
        table: str,
        select: str = '*',
        eq: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        ascending: bool = True,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """Select rows with equality filters, one ordering column and a limit."""
        try:
            builder = self.client.table(table).select(select)
            for column, value in (eq or {}).items():
                builder = builder.eq(column, value)
            if order:
                builder = builder.order(order, desc=not ascending)
            if limit:
                builder = builder.limit(limit)
            result = builder.execute()
        except ClientNotReadyError:
            raise
        except Exception as e:
            logger.error(f"Error querying {table}: {e}")
            raise _database_error(e, f"query {table}")
        return result.data or []

    def insert(self, table: str, data: Union[dict, List[dict]]) -> List[dict]:
        try:
            result = self.client.table(table).insert(data).execute()
        except ClientNotReadyError:
            raise
        except Exception as e:
            logger.error(f"Error inserting into {table}: {e}")
            raise _database_error(e, f"insert {table}")
        return result.data or []

    def update(self, table: str, row_id: Any, data: dict) -> List[dict]:
        try:
            result = self.client.table(table).update(data).eq('id', row_id).execute()
        except ClientNotReadyError:
            raise
        except Exception as e:
            logger.error(f"Error updating {table}/{row_id}: {e}")
            raise _database_error(e, f"update {table}")
        return result.data or []

    def delete(self, table: str, row_id: Any) -> None:
        try:
            self.client.table(table).delete().eq('id', row_id).execute()
        except ClientNotReadyError:
            raise
        except Exception as e:
            logger.error(f"Error deleting {table}/{row_id}: {e}")
            raise _database_error(e, f"delete {table}")

    def fetch_lookup_rows(self, table: str) -> List[dict]:
        """Active rows of a lookup table, ordered by ``sort_order``."""
        return self.query(table, eq={'is_active': True}, order='sort_order')

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def upload(self, bucket: str, path: str, file: Union[bytes, BinaryIO, str], content_type: Optional[str] = None):
        options = {'content-type': content_type} if content_type else None
        try:
            bucket_api = self.client.storage.from_(bucket)
            if options:
                return bucket_api.upload(path, file, options)
            return bucket_api.upload(path, file)
        except ClientNotReadyError:
            raise
        except Exception as e:
            logger.error(f"Error uploading {bucket}/{path}: {e}")
            raise _database_error(e, "upload")

    def get_public_url(self, bucket: str, path: str) -> Optional[str]:
        """Public URL of an object, or None before initialization."""
        if not self.is_ready:
            return None
        return self.client.storage.from_(bucket).get_public_url(path)

    def remove(self, bucket: str, paths: List[str]) -> None:
        try:
            self.client.storage.from_(bucket).remove(paths)
        except ClientNotReadyError:
            raise
        except Exception as e:
            logger.error(f"Error removing from {bucket}: {e}")
            raise _database_error(e, "remove")
