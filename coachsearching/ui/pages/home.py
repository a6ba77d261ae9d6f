"""Home page for CoachSearching.

Landing page with a quick search box and the specialties from the lookup
tables. Submitting the search hands the query to the coach search and
navigates to the coaches page.
"""

import logging

import streamlit as st

from coachsearching.config.settings import ROUTES, config
from coachsearching.routing import Link

logger = logging.getLogger(__name__)

_MAX_FEATURED_SPECIALTIES = 8


def render_home_page(services, route) -> None:
    """Render the landing page."""
    st.title(f"{config.APP_ICON} {config.APP_NAME}")
    st.caption("Find a certified coach for your goals, online or near you")

    render_quick_search(services)

    st.divider()

    render_featured_specialties(services)


def render_quick_search(services) -> None:
    """Search box that starts a coach search and opens the results."""
    with st.form("home_search", border=False):
        col1, col2 = st.columns([4, 1])
        with col1:
            query = st.text_input(
                "Search coaches",
                value=services.search.query,
                placeholder="Career, leadership, life coaching...",
                label_visibility="collapsed",
            )
        with col2:
            submitted = st.form_submit_button("Search", type="primary", width='stretch')

    if submitted:
        services.search.update_query(query)
        services.router.navigate(ROUTES['COACHES'])
        st.rerun()


def render_featured_specialties(services) -> None:
    """Specialty chips from the lookup options (shown once loaded)."""
    context = services.context
    specialties = context.lookup_options['specialties'][:_MAX_FEATURED_SPECIALTIES]

    st.markdown("### Popular specialties")
    if not specialties:
        if context.lookup_options_loaded:
            st.caption("No specialties available yet.")
        else:
            st.caption("Loading specialties...")
        return

    cols = st.columns(4)
    for i, option in enumerate(specialties):
        label = context.get_localized_name(option)
        with cols[i % 4]:
            if st.button(f"{option.icon or ''} {label}".strip(), key=f"specialty_{option.code}", width='stretch'):
                services.search.update_query("", {'specialties': [option.code]})
                services.router.navigate(ROUTES['COACHES'])
                st.rerun()

    st.divider()
    Link(ROUTES['COACHES'], "Browse all coaches →").render(services.router, key="home_browse_all")
