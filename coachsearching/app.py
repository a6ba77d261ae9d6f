"""CoachSearching Frontend Application.

Streamlit app that routes on the ``route`` query parameter the way the
browser app routes on the URL hash.
"""

import logging
from pathlib import Path

# Load environment variables from .env file BEFORE any other imports
# This ensures Supabase and API settings are read by the config module
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / ".env")

import streamlit as st

from coachsearching.config.settings import config
from coachsearching.container import AppServices, build_services
from coachsearching.routing import Route, Switch
from coachsearching.utils import SessionState
from coachsearching.ui.components import (
    render_navbar,
    render_notification,
    render_sidebar,
    render_with_error_boundary,
)
from coachsearching.ui.pages import (
    render_home_page,
    render_coaches_page,
    render_coach_profile_page,
    render_login_page,
    render_signup_page,
    render_signout_page,
    render_not_found_page,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

_SERVICES_KEY = "services"


def get_services() -> AppServices:
    """Services for this browser session, built on the first run."""
    def _build() -> AppServices:
        logger.info(f"Building services for session {SessionState.get_session_id()[:8]}...")
        services = build_services(st.query_params, settings=config)
        services.context.load_lookups_in_background()
        return services

    return SessionState.get_or_create(_SERVICES_KEY, _build)


def _close_services() -> None:
    services = SessionState.get(_SERVICES_KEY)
    if services is not None:
        services.close()


def build_switch(services: AppServices) -> Switch:
    """Page table, first match wins; the path-less route is the catch-all."""
    def page(render):
        return lambda route: render(services, route)

    return Switch(
        Route("home", page(render_home_page), exact=True),
        Route("coaches", page(render_coaches_page), exact=True),
        Route("coach", page(render_coach_profile_page), exact=True),
        Route("login", page(render_login_page), exact=True),
        Route("signup", page(render_signup_page), exact=True),
        Route("signout", page(render_signout_page), exact=True),
        Route(render=page(render_not_found_page)),
    )


def main():
    """Main application entry point."""
    # Page configuration - must be first Streamlit command
    st.set_page_config(
        page_title=config.APP_NAME,
        page_icon=config.APP_ICON,
        layout="wide",
        initial_sidebar_state="expanded",
    )

    # Initialize session state with defaults
    SessionState.init_defaults()

    services = get_services()

    # Pick up route changes made outside the app (address bar, back button)
    services.location.sync()

    render_sidebar(services)
    render_navbar(services)
    render_notification(services.context)

    st.divider()

    render_with_error_boundary(
        build_switch(services).render,
        services.router,
        on_reset=_close_services,
    )


if __name__ == "__main__":
    main()
