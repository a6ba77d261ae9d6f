"""Coach profile page for CoachSearching.

Route: ``#coach/<id>?tab=about|reviews|availability``. The tab lives in
the hash, so a profile tab can be linked to and survives a reload.
"""

import logging
from typing import Any, Optional

import streamlit as st

from coachsearching.config.settings import ROUTES, config
from coachsearching.routing import Redirect, build_hash
from coachsearching.services import CoachSummary, response_data
from coachsearching.utils import with_error_handling

logger = logging.getLogger(__name__)

TABS = ("about", "reviews", "availability")
TAB_LABELS = {
    'about': "About",
    'reviews': "Reviews",
    'availability': "Availability",
}


def current_tab(route) -> str:
    """Tab from the route params; unknown values fall back to ``about``."""
    tab = route.param('tab', TABS[0])
    return tab if tab in TABS else TABS[0]


def render_coach_profile_page(services, route) -> None:
    """Render a coach profile, or go back to the list without an id."""
    coach_id = route.id
    if not coach_id:
        if Redirect(ROUTES['COACHES']).apply(services.router):
            st.rerun()
        return

    context = services.context
    payload = with_error_handling(
        services.api_client.coaches.get,
        coach_id,
        fallback=None,
        context="coach_profile",
        notify=context.show_notification,
    )
    coach = _to_coach(response_data(payload))
    if coach is None:
        st.warning("This coach could not be found.")
        if st.button("← Back to coaches", key="profile_back_missing"):
            services.router.navigate(ROUTES['COACHES'])
            st.rerun()
        return

    render_profile_header(services, coach)

    tab = current_tab(route)
    selected = st.radio(
        "Section",
        TABS,
        index=TABS.index(tab),
        format_func=lambda t: TAB_LABELS[t],
        horizontal=True,
        label_visibility="collapsed",
        key=f"profile_tab_{coach_id}",
    )
    if selected != tab:
        services.router.navigate(build_hash('coach', coach_id, {'tab': selected}))
        st.rerun()

    st.divider()

    if tab == 'about':
        render_about_tab(services, coach)
    elif tab == 'reviews':
        render_reviews_tab(services, coach_id, route)
    else:
        render_availability_tab(services, coach_id)


def _to_coach(data: Any) -> Optional[CoachSummary]:
    if isinstance(data, dict) and isinstance(data.get('coach'), dict):
        data = data['coach']
    if not isinstance(data, dict):
        return None
    try:
        return CoachSummary.model_validate(data)
    except ValueError as e:
        logger.warning(f"Invalid coach payload: {e}")
        return None


def render_profile_header(services, coach: CoachSummary) -> None:
    context = services.context
    col1, col2 = st.columns([1, 4])
    with col1:
        if coach.avatar_url:
            st.image(coach.avatar_url, width=120)
    with col2:
        st.title(coach.full_name or "Coach")
        if coach.title:
            st.caption(coach.title)
        st.markdown(f"**{context.format_price(coach.hourly_rate)}** per hour")


def render_about_tab(services, coach: CoachSummary) -> None:
    context = services.context
    st.markdown(coach.bio or "_This coach has not written a bio yet._")

    specialties = _localized_codes(context, 'specialties', coach.specialties)
    languages = _localized_codes(context, 'languages', coach.languages)
    if specialties:
        st.markdown(f"**Specialties:** {', '.join(specialties)}")
    if languages:
        st.markdown(f"**Languages:** {', '.join(languages)}")
    if coach.location_city:
        st.markdown(f"**Location:** {coach.location_city}")

    st.markdown("**Session prices**")
    for minutes in config.SESSION_DURATIONS:
        price = coach.hourly_rate * minutes / 60
        st.caption(f"{minutes} min: {context.format_price(price)}")


def _localized_codes(context, group: str, codes) -> list:
    by_code = {option.code: option for option in context.lookup_options.get(group, [])}
    return [context.get_localized_name(by_code[code]) if code in by_code else code for code in codes]


def render_reviews_tab(services, coach_id: str, route) -> None:
    try:
        page = max(int(route.param('page', '1')), 1)
    except ValueError:
        page = 1

    payload = with_error_handling(
        services.api_client.coaches.get_reviews,
        coach_id,
        page=page,
        fallback=None,
        context="coach_reviews",
        notify=services.context.show_notification,
    )
    reviews = _list_from(response_data(payload), 'reviews')
    if not reviews:
        st.info("No reviews yet.")
        return

    for review in reviews[:config.REVIEWS_PER_PAGE]:
        with st.container(border=True):
            rating = review.get('rating')
            if rating:
                st.markdown("⭐" * int(rating))
            st.markdown(review.get('comment') or review.get('content') or "")
            author = review.get('client_name') or review.get('author')
            if author:
                st.caption(f"by {author}")

    col1, col2 = st.columns(2)
    with col1:
        if page > 1 and st.button("← Newer", key="reviews_prev"):
            services.router.navigate(build_hash('coach', coach_id, {'tab': 'reviews', 'page': page - 1}))
            st.rerun()
    with col2:
        if len(reviews) >= config.REVIEWS_PER_PAGE and st.button("Older →", key="reviews_next"):
            services.router.navigate(build_hash('coach', coach_id, {'tab': 'reviews', 'page': page + 1}))
            st.rerun()


def render_availability_tab(services, coach_id: str) -> None:
    payload = with_error_handling(
        services.api_client.coaches.get_availability,
        coach_id,
        fallback=None,
        context="coach_availability",
        notify=services.context.show_notification,
    )
    slots = _list_from(response_data(payload), 'availability', 'slots')
    if not slots:
        st.info("No availability published.")
        return

    for slot in slots:
        day = slot.get('day_of_week', slot.get('date', ''))
        st.markdown(f"**{day}** {slot.get('start_time', '')} - {slot.get('end_time', '')}")


def _list_from(data: Any, *keys: str) -> list:
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), list):
                return [item for item in data[key] if isinstance(item, dict)]
    return []
