"""Coach card component for CoachSearching.

Displays a coach summary in the search grid, with the hourly rate in the
selected currency and a link to the profile.
"""

import html
import logging
from typing import List

import streamlit as st

from coachsearching.routing import Link, build_hash
from coachsearching.services.schemas import CoachSummary

logger = logging.getLogger(__name__)


def _rating_text(coach: CoachSummary) -> str:
    if not coach.rating_count or coach.rating_average is None:
        return "New coach"
    return f"⭐ {coach.rating_average:.1f} ({coach.rating_count})"


def render_coach_card(coach: CoachSummary, services, key_prefix: str = "") -> None:
    """Render one coach card.

    Args:
        coach: Validated coach summary
        services: Session services (router and app context are used)
        key_prefix: Prefix for widget keys to ensure uniqueness
    """
    context = services.context
    name = coach.full_name or "Unnamed coach"

    # Truncate long names (max 28 chars for display)
    display_name = name if len(name) <= 28 else name[:26] + "..."

    with st.container(border=True):
        st.markdown(
            f"<h3 style='margin: 0 0 6px 0; overflow: hidden; text-overflow: ellipsis; "
            f"white-space: nowrap;' title='{html.escape(name)}'>{html.escape(display_name)}</h3>",
            unsafe_allow_html=True
        )
        if coach.title:
            st.caption(coach.title)

        col1, col2 = st.columns(2)
        with col1:
            st.markdown(f"**{context.format_price(coach.hourly_rate)}** / hour")
        with col2:
            st.markdown(_rating_text(coach))

        if coach.location_city:
            st.caption(f"📍 {coach.location_city}")
        if coach.specialties:
            st.caption(", ".join(coach.specialties[:3]))

        link = Link(build_hash('coach', coach.id), "View Profile")
        link.render(services.router, key=f"{key_prefix}coach_{coach.id}", width='stretch')


def render_coach_grid(coaches: List[CoachSummary], services, columns: int = 3) -> None:
    """Render a grid of coach cards (3 columns by default)."""
    if not coaches:
        st.info("No coaches match your search.")
        return

    for row_start in range(0, len(coaches), columns):
        row_coaches = coaches[row_start:row_start + columns]
        cols = st.columns(columns)

        for i, coach in enumerate(row_coaches):
            with cols[i]:
                render_coach_card(coach, services, key_prefix=f"grid_{row_start}_")
