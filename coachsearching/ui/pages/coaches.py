"""Coach search page for CoachSearching.

Search text and filters feed the session's CoachSearch, which debounces
them before calling the API. Results are drawn by a fragment that polls
the search state, so a finished search shows up without a full rerun.
"""

import logging
from typing import Any, Dict

import streamlit as st

from coachsearching.config.settings import config
from coachsearching.ui.components import render_coach_grid
from coachsearching.utils import SessionState

logger = logging.getLogger(__name__)

_QUERY_KEY = "coaches_query_input"


def render_coaches_page(services, route) -> None:
    """Render the search page."""
    st.title("Find a Coach")

    filters = render_filters(services)
    render_search_box(services, filters)

    # First visit: search with whatever the session already holds
    search = services.search
    if search.search_count == 0 and not search.pending and not search.is_searching:
        search.update_query(search.query, filters)

    st.divider()

    render_search_results(services)


def render_search_box(services, filters: Dict[str, Any]) -> None:
    search = services.search
    if _QUERY_KEY not in st.session_state:
        st.session_state[_QUERY_KEY] = search.query

    col1, col2 = st.columns([5, 1])
    with col1:
        st.text_input(
            "Search coaches",
            key=_QUERY_KEY,
            placeholder="Search by name, specialty or keyword...",
            label_visibility="collapsed",
            on_change=_on_query_change,
            args=(services,),
        )
    with col2:
        if st.button("Search", type="primary", width='stretch', key="coaches_search_now"):
            search.update_query(st.session_state[_QUERY_KEY], filters)
            search.search_now()

    SessionState.set('coach_search_query', search.query)


def _on_query_change(services) -> None:
    services.search.update_query(
        st.session_state[_QUERY_KEY],
        SessionState.get('coach_search_filters', {}),
    )


def render_filters(services) -> Dict[str, Any]:
    """Lookup-driven filter widgets. Returns the filter dict for the API."""
    context = services.context
    grouped = context.lookup_options
    current = dict(services.search.filters)

    with st.expander("Filters", expanded=bool(current)):
        col1, col2, col3 = st.columns(3)
        with col1:
            specialties = _multiselect(context, "Specialties", grouped['specialties'], current.get('specialties'), "filter_specialties")
        with col2:
            languages = _multiselect(context, "Languages", grouped['languages'], current.get('languages'), "filter_languages")
        with col3:
            formats = _multiselect(context, "Session format", grouped['session_formats'], current.get('session_formats'), "filter_formats")

        col4, col5 = st.columns(2)
        with col4:
            city_codes = [""] + [city.code for city in context.cities]
            cities_by_code = {city.code: city for city in context.cities}
            selected_city = current.get('city') or ""
            city = st.selectbox(
                "City",
                city_codes,
                index=city_codes.index(selected_city) if selected_city in city_codes else 0,
                format_func=lambda code: context.get_localized_city_name(cities_by_code[code]) if code else "Any city",
                key="filter_city",
            )
        with col5:
            max_rate = st.number_input(
                f"Max hourly rate (EUR), shown in {context.currency}",
                min_value=0,
                value=int(current.get('max_rate') or 0),
                step=10,
                key="filter_max_rate",
                help="0 means no limit",
            )
            if max_rate:
                st.caption(f"Up to {context.format_price(max_rate)}")

    filters: Dict[str, Any] = {}
    if specialties:
        filters['specialties'] = specialties
    if languages:
        filters['languages'] = languages
    if formats:
        filters['session_formats'] = formats
    if city:
        filters['city'] = city
    if max_rate:
        filters['max_rate'] = max_rate

    if filters != SessionState.get('coach_search_filters', {}):
        SessionState.set('coach_search_filters', filters)
        if services.search.search_count > 0 or services.search.pending:
            services.search.update_query(services.search.query, filters)
    return filters


def _multiselect(context, label: str, options: list, selected, key: str) -> list:
    codes = [option.code for option in options]
    labels = {option.code: context.get_localized_name(option) for option in options}
    default = [code for code in (selected or []) if code in codes]
    return st.multiselect(
        label,
        codes,
        default=default,
        format_func=lambda code: labels.get(code, code),
        key=key,
        disabled=not codes,
    )


@st.fragment(run_every=config.SEARCH_RESULTS_POLL_SECONDS)
def render_search_results(services) -> None:
    """Render search results with automatic polling.

    Only this fragment reruns on the interval while the rest of the page
    (filters, search box) stays put.
    """
    search = services.search

    if search.pending or search.is_searching:
        st.caption("Searching...")

    if search.error is not None:
        st.error(search.error.message)
        return

    if search.search_count == 0:
        return

    count = len(search.results)
    st.caption(f"{count} coach{'es' if count != 1 else ''} found")
    render_coach_grid(search.results[:config.COACHES_PER_PAGE], services)
