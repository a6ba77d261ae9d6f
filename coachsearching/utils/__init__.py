"""Utilities for CoachSearching frontend."""
from coachsearching.utils.session_state import SessionState
from coachsearching.utils.exceptions import (
    ErrorType,
    CoachSearchingError,
    APIError,
    NetworkError,
    AuthenticationError,
    ValidationError,
    NotFoundError,
    RateLimitError,
    ServerError,
    DatabaseError,
    ClientNotReadyError,
    ParsedError,
    parse_error,
    handle_error,
    with_error_handling,
)
from coachsearching.utils.storage import (
    LocalStorage,
    MemoryStorage,
    FileStorage,
    read_json,
    write_json,
)
from coachsearching.utils.cache import (
    CacheEntry,
    StorageTTLCache,
    now_ms,
)
from coachsearching.utils.debounce import Debouncer, RequestGeneration

__all__ = [
    # Session state
    "SessionState",
    # Exceptions
    "ErrorType",
    "CoachSearchingError",
    "APIError",
    "NetworkError",
    "AuthenticationError",
    "ValidationError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "DatabaseError",
    "ClientNotReadyError",
    "ParsedError",
    "parse_error",
    "handle_error",
    "with_error_handling",
    # Storage
    "LocalStorage",
    "MemoryStorage",
    "FileStorage",
    "read_json",
    "write_json",
    # Cache
    "CacheEntry",
    "StorageTTLCache",
    "now_ms",
    # Debounce
    "Debouncer",
    "RequestGeneration",
]
