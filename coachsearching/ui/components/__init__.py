"""Reusable UI components for CoachSearching."""
from coachsearching.ui.components.navbar import (
    render_navbar,
    navbar_links,
    is_signed_in,
)
from coachsearching.ui.components.sidebar import (
    render_sidebar,
    render_notification,
    render_locale_selectors,
    render_lookup_status,
    render_lookup_status_polling,
)
from coachsearching.ui.components.error_boundary import (
    render_with_error_boundary,
    render_error_fallback,
    reset_session,
)
from coachsearching.ui.components.coach_card import (
    render_coach_card,
    render_coach_grid,
)

__all__ = [
    # Navbar
    "render_navbar",
    "navbar_links",
    "is_signed_in",
    # Sidebar
    "render_sidebar",
    "render_notification",
    "render_locale_selectors",
    "render_lookup_status",
    "render_lookup_status_polling",
    # Error boundary
    "render_with_error_boundary",
    "render_error_fallback",
    "reset_session",
    # Coach card
    "render_coach_card",
    "render_coach_grid",
]
