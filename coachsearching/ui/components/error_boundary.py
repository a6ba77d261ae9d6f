"""Error boundary for page rendering.

A page that raises is replaced by a generic fallback instead of the
Streamlit traceback. The reload action resets the session so the next
run starts from freshly built services.
"""

import logging
from typing import Any, Callable, Optional

import streamlit as st

from coachsearching.utils import SessionState, parse_error

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Something went wrong while showing this page."


def reset_session(on_reset: Optional[Callable[[], None]] = None) -> None:
    """Run ``on_reset`` (e.g. close services) and clear all session state."""
    if on_reset is not None:
        try:
            on_reset()
        except Exception as e:
            logger.error(f"Session reset hook failed: {e}")
    SessionState.clear_all()


def render_error_fallback(error: Exception, on_reset: Optional[Callable[[], None]] = None, key: str = "error_boundary_reload") -> None:
    """Show the generic fallback with a reload button."""
    parsed = parse_error(error)
    st.error(FALLBACK_MESSAGE)
    st.caption(f"Error code: {parsed.code}")
    st.button(
        "Reload",
        key=key,
        type="primary",
        on_click=reset_session,
        args=(on_reset,),
    )


def render_with_error_boundary(
    render: Callable[..., Any],
    *args,
    on_reset: Optional[Callable[[], None]] = None,
    **kwargs,
) -> Any:
    """Call ``render`` and contain any exception it raises.

    Streamlit's own rerun and stop signals derive from BaseException and
    pass through untouched.

    Returns:
        The renderer's result, or None when it failed
    """
    try:
        return render(*args, **kwargs)
    except Exception as e:
        logger.exception(f"Page render failed: {e}")
        SessionState.set('last_error', parse_error(e))
        render_error_fallback(e, on_reset=on_reset)
        return None
