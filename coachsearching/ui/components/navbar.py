"""Top navigation bar for CoachSearching.

Renders the primary Links in a row of columns. The active link is drawn
as a primary button; clicking a link navigates through the router.
"""

import logging
from typing import List

import streamlit as st

from coachsearching.config.settings import ROUTES, STORAGE_KEY_AUTH_SESSION
from coachsearching.routing import Link

logger = logging.getLogger(__name__)

PUBLIC_LINKS = (
    Link(ROUTES['HOME'], "Home"),
    Link(ROUTES['COACHES'], "Find a Coach"),
)

GUEST_LINKS = (
    Link(ROUTES['LOGIN'], "Sign In"),
    Link(ROUTES['SIGNUP'], "Sign Up"),
)

MEMBER_LINKS = (
    Link(ROUTES['SIGNOUT'], "Sign Out"),
)


def is_signed_in(services) -> bool:
    """True when a session is stored for this browser session."""
    return services.storage.get_item(STORAGE_KEY_AUTH_SESSION) is not None


def navbar_links(services) -> List[Link]:
    links = list(PUBLIC_LINKS)
    links.extend(MEMBER_LINKS if is_signed_in(services) else GUEST_LINKS)
    return links


def render_navbar(services) -> None:
    """Render the navigation links for the current route."""
    links = navbar_links(services)
    columns = st.columns(len(links))
    for column, link in zip(columns, links):
        with column:
            link.render(services.router, key=f"nav_{link.target_path}", width='stretch')
