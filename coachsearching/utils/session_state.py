"""Session state management for the CoachSearching frontend.

This module provides centralized session state management for Streamlit,
with features like:
- Default value initialization
- Type-safe access
- Lazily built per-session objects (services, router, context)
- User session isolation (via session_id)
"""

import copy
import logging
import uuid
from typing import Any, Callable, Dict, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


def _default_factory(value: Any) -> Callable[[], Any]:
    """Create a factory function that returns a deep copy of the value.

    This prevents mutable default values from being shared across sessions.
    """
    if isinstance(value, (list, dict, set)):
        return lambda: copy.deepcopy(value)
    return lambda: value


class SessionState:
    """Centralized session state management for CoachSearching.

    This class provides a clean interface for managing Streamlit session state.
    It handles initialization, access, and cleanup of session state values.

    Example:
        >>> from coachsearching.utils import SessionState
        >>> SessionState.init_defaults()
        >>> SessionState.set('my_key', 'my_value')
        >>> value = SessionState.get('my_key')
    """

    # Default value factories for session state keys
    _DEFAULT_FACTORIES: Dict[str, Callable[[], Any]] = {
        # Session isolation - unique ID per browser session
        'session_id': lambda: str(uuid.uuid4()),

        # Search form
        'coach_search_query': lambda: "",
        'coach_search_filters': _default_factory({}),

        # Auth form
        'auth_email': lambda: "",

        # Error state
        'last_error': lambda: None,
    }

    # Keys associated with each page
    PAGE_KEYS: Dict[str, List[str]] = {
        'coaches': [
            'coach_search_query',
            'coach_search_filters',
        ],
        'login': [
            'auth_email',
        ],
    }

    @classmethod
    def _get_session_state(cls):
        """Get Streamlit session state (lazy import for testing)."""
        try:
            import streamlit as st
            return st.session_state
        except ImportError:
            # Fallback for testing without Streamlit
            if not hasattr(cls, '_mock_state'):
                cls._mock_state = {}
            return cls._mock_state

    @classmethod
    def init_defaults(cls) -> None:
        """Initialize default session state values.

        Call this at the start of your Streamlit app to ensure
        all expected keys exist with sensible defaults.
        """
        session_state = cls._get_session_state()

        for key, factory in cls._DEFAULT_FACTORIES.items():
            if key not in session_state:
                session_state[key] = factory()
                logger.debug(f"Initialized session state key: {key}")

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a value from session state."""
        session_state = cls._get_session_state()
        return session_state.get(key, default)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """Set a value in session state."""
        session_state = cls._get_session_state()
        session_state[key] = value
        logger.debug(f"Set session state: {key} = {type(value).__name__}")

    @classmethod
    def clear(cls, key: str) -> None:
        """Clear a session state key."""
        session_state = cls._get_session_state()
        if key in session_state:
            del session_state[key]
            logger.debug(f"Cleared session state key: {key}")

    @classmethod
    def clear_page(cls, page: str) -> None:
        """Clear all state associated with a specific page."""
        for key in cls.PAGE_KEYS.get(page, []):
            cls.clear(key)
        logger.debug(f"Cleared session state for page: {page}")

    @classmethod
    def clear_all(cls) -> None:
        """Remove every key (full reset of the session)."""
        session_state = cls._get_session_state()
        for key in list(session_state.keys()):
            del session_state[key]
        logger.info("Session state reset")

    @classmethod
    def has(cls, key: str) -> bool:
        """Check if a key exists in session state."""
        session_state = cls._get_session_state()
        return key in session_state

    @classmethod
    def get_or_set(cls, key: str, default: Any) -> Any:
        """Get value if exists, otherwise set and return default."""
        if not cls.has(key):
            cls.set(key, default)
        return cls.get(key)

    @classmethod
    def get_or_create(cls, key: str, factory: Callable[[], T]) -> T:
        """Get value if exists, otherwise build it with ``factory`` and store it.

        Used for per-session objects that must survive reruns.
        """
        if not cls.has(key):
            cls.set(key, factory())
        return cls.get(key)

    # Session ID helpers
    @classmethod
    def get_session_id(cls) -> str:
        """Get the unique session ID for this browser session.

        Returns:
            Unique session ID string (UUID format)
        """
        session_id = cls.get('session_id')
        if not session_id:
            session_id = str(uuid.uuid4())
            cls.set('session_id', session_id)
            logger.info(f"Generated new session ID: {session_id[:8]}...")
        return session_id
